from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import List, Optional

from .sanitization import sanitize_label, sanitize_string

# --- AUTH ---
class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Optional[str] = None

    @field_validator('name')
    @classmethod
    def clean_name(cls, v):
        return sanitize_string(v, max_length=120)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class LoginResponse(BaseModel):
    token: str
    role: str
    name: str

# --- TASKS ---
class CreateTaskRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ''
    category: str = ''
    points: int = Field(gt=0)
    expectedLabels: List[str] = []
    deadline: Optional[datetime] = None

    @field_validator('title', 'description', 'category')
    @classmethod
    def clean_text(cls, v):
        return sanitize_string(v)

    @field_validator('expectedLabels')
    @classmethod
    def clean_labels(cls, v):
        labels = [sanitize_label(label) for label in v]
        return [label for label in labels if label]

class TaskResponse(BaseModel):
    id: int
    title: str
    description: str
    category: str
    points: int
    expectedLabels: List[str]
    deadline: Optional[datetime] = None
    isActive: bool
    createdBy: Optional[int] = None

# --- SUBMISSIONS ---
class ReviewRequest(BaseModel):
    status: str

class StudentSummary(BaseModel):
    id: int
    name: str
    email: str

class TaskSummary(BaseModel):
    id: int
    title: str
    points: int

class SubmissionResponse(BaseModel):
    id: int
    studentId: int
    taskId: int
    imageUrl: str
    status: str
    labels: List[str]
    aiScore: int
    createdAt: Optional[datetime] = None
    reviewedBy: Optional[int] = None
    reviewedAt: Optional[datetime] = None

# The admin review list joins each submission with its student and task
class SubmissionWithSummary(SubmissionResponse):
    student: Optional[StudentSummary] = None
    task: Optional[TaskSummary] = None

# --- GAMIFICATION ---
class LeaderboardEntryResponse(BaseModel):
    name: str
    points: int = 0
    badges: List[str] = []

class ProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    points: int = 0
    badges: List[str] = []
