import enum
import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, JSON, Enum
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, relationship

from errors import StorageError


class Base(DeclarativeBase):
    pass

db = SQLAlchemy(model_class=Base)


def utcnow():
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    STUDENT = 'student'
    ADMIN = 'admin'


class SubmissionStatus(str, enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    @classmethod
    def parse(cls, value):
        """Returns the member for `value` (case-insensitive) or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Account(db.Model):
    __tablename__ = 'accounts'

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(254), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role, values_callable=_enum_values, native_enum=False, length=20),
                  nullable=False, default=Role.STUDENT)
    # Written only by ledger.credit
    points = Column(Integer, nullable=False, default=0)
    badges = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    submissions = relationship('Submission', back_populates='student', foreign_keys='Submission.student_id')

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def __repr__(self):
        return f'<Account {self.id} {self.email}>'


class Task(db.Model):
    __tablename__ = 'tasks'

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default='')
    category = Column(String(100), nullable=False, default='')
    points = Column(Integer, nullable=False)
    expected_labels = Column(JSON, nullable=False, default=list)  # e.g. ['tree', 'plant']
    deadline = Column(DateTime(timezone=True))
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey('accounts.id'))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    submissions = relationship('Submission', back_populates='task')

    def __repr__(self):
        return f'<Task {self.id} {self.title}>'


class Submission(db.Model):
    __tablename__ = 'submissions'

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('accounts.id'), nullable=False)
    task_id = Column(Integer, ForeignKey('tasks.id'), nullable=False)
    image_url = Column(String(500), nullable=False)
    status = Column(Enum(SubmissionStatus, values_callable=_enum_values, native_enum=False, length=20),
                    nullable=False, default=SubmissionStatus.PENDING)
    labels = Column(JSON, nullable=False, default=list)
    ai_score = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    reviewed_by = Column(Integer, ForeignKey('accounts.id'))
    reviewed_at = Column(DateTime(timezone=True))

    student = relationship('Account', back_populates='submissions', foreign_keys=[student_id])
    task = relationship('Task', back_populates='submissions')

    def __repr__(self):
        return f'<Submission {self.id} {self.status.value}>'


@contextmanager
def unit_of_work():
    """
    Runs the enclosed block as one database transaction.
    Commits on success; rolls back on any error and re-raises database
    failures as StorageError so callers never see a half-applied change.
    """
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logging.error(f"Database transaction failed: {e}", exc_info=True)
        raise StorageError("Database operation failed") from e
    except Exception:
        db.session.rollback()
        raise
