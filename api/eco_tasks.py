from flask import Blueprint, request, jsonify

from models import Role
from task_catalog import create_task, list_active_tasks
from .auth import token_required
from .pydantic_models import CreateTaskRequest, TaskResponse

tasks_bp = Blueprint('tasks_bp', __name__)

def task_to_response(task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        category=task.category,
        points=task.points,
        expectedLabels=list(task.expected_labels or []),
        deadline=task.deadline,
        isActive=task.is_active,
        createdBy=task.created_by,
    )

@tasks_bp.route('', methods=['POST'])
@token_required(roles=[Role.ADMIN])
def create_task_endpoint(user_id):
    req_data = CreateTaskRequest.model_validate(request.get_json(silent=True))
    task = create_task(
        user_id,
        title=req_data.title,
        description=req_data.description,
        category=req_data.category,
        points=req_data.points,
        expected_labels=req_data.expectedLabels,
        deadline=req_data.deadline,
    )
    return jsonify(task_to_response(task).model_dump(mode='json')), 201

@tasks_bp.route('', methods=['GET'])
@token_required
def list_tasks_endpoint(user_id):
    tasks = list_active_tasks()
    return jsonify([task_to_response(t).model_dump(mode='json') for t in tasks]), 200
