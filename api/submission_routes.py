from flask import Blueprint, current_app, request, jsonify, send_from_directory, abort

from errors import InvalidInputError
from models import Role
from submissions import create_submission, list_submissions, review_submission
from .auth import token_required
from .pydantic_models import ReviewRequest, StudentSummary, SubmissionResponse, SubmissionWithSummary, TaskSummary

submissions_bp = Blueprint('submissions_bp', __name__)
uploads_bp = Blueprint('uploads_bp', __name__)

def submission_fields(sub) -> dict:
    return dict(
        id=sub.id,
        studentId=sub.student_id,
        taskId=sub.task_id,
        imageUrl=sub.image_url,
        status=sub.status.value,
        labels=list(sub.labels or []),
        aiScore=sub.ai_score,
        createdAt=sub.created_at,
        reviewedBy=sub.reviewed_by,
        reviewedAt=sub.reviewed_at,
    )

def submission_with_summary(sub) -> SubmissionWithSummary:
    student = sub.student
    task = sub.task
    return SubmissionWithSummary(
        **submission_fields(sub),
        student=StudentSummary(id=student.id, name=student.name, email=student.email) if student else None,
        task=TaskSummary(id=task.id, title=task.title, points=task.points) if task else None,
    )

@submissions_bp.route('/<int:task_id>', methods=['POST'])
@token_required(roles=[Role.STUDENT])
def create_submission_endpoint(user_id, task_id):
    image = request.files.get('image')
    if image is None or not image.filename:
        raise InvalidInputError("Image is required")

    submission = create_submission(
        user_id,
        task_id,
        image.read(),
        image.filename,
        labeler=current_app.config['LABELER'],
        blob_store=current_app.config['BLOB_STORE'],
    )
    return jsonify(SubmissionResponse(**submission_fields(submission)).model_dump(mode='json')), 201

@submissions_bp.route('', methods=['GET'])
@token_required(roles=[Role.ADMIN])
def list_submissions_endpoint(user_id):
    subs = list_submissions()
    return jsonify([submission_with_summary(s).model_dump(mode='json') for s in subs]), 200

@submissions_bp.route('/<int:submission_id>', methods=['PATCH'])
@token_required(roles=[Role.ADMIN])
def review_submission_endpoint(user_id, submission_id):
    req_data = ReviewRequest.model_validate(request.get_json(silent=True))
    submission = review_submission(user_id, submission_id, req_data.status)
    return jsonify(submission_with_summary(submission).model_dump(mode='json')), 200

@uploads_bp.route('/<path:filename>', methods=['GET'])
def serve_upload(filename):
    blob_store = current_app.config['BLOB_STORE']
    folder = getattr(blob_store, 'folder', None)
    if not folder:
        abort(404)
    return send_from_directory(folder, filename)
