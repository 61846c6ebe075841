"""
Submission lifecycle.

A submission is created in the state picked by the approval policy
(pending or approved) and afterwards only moves through admin reviews.
Every transition into APPROVED credits the task's points exactly once; the
status the submission had when it was read is the idempotency guard, and the
status write is conditional on that value so two concurrent reviews cannot
both credit.
"""

import logging
from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

import ledger
from errors import (
    ConflictError, ForbiddenError, InvalidInputError, InvalidStatusError,
    NotFoundError, StorageError, TaskNotFoundError,
)
from models import db, unit_of_work, utcnow, Account, Role, Submission, SubmissionStatus, Task
from scoring import decide_initial_status, match_labels

REVIEW_MAX_ATTEMPTS = 3

# Statuses an admin may set. Any submission may be moved to either of them,
# including approved -> rejected, which keeps the points already credited.
REVIEW_STATUSES = {SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}


def credits_on_review(current: SubmissionStatus, requested: SubmissionStatus) -> bool:
    """True when moving from `current` to `requested` must credit points."""
    return current != SubmissionStatus.APPROVED and requested == SubmissionStatus.APPROVED


def create_submission(student_id, task_id, image_bytes, filename, *, labeler, blob_store) -> Submission:
    student = db.session.get(Account, student_id)
    if student is None:
        raise NotFoundError("Account not found")
    if student.role != Role.STUDENT:
        raise ForbiddenError("Only students can submit task proof")

    task = db.session.get(Task, task_id)
    if task is None:
        raise TaskNotFoundError()
    if not image_bytes:
        raise InvalidInputError("Image is required")

    image_url = blob_store.save(image_bytes, filename)
    try:
        result = match_labels(labeler.detect_labels(image_url), task.expected_labels)
        status = decide_initial_status(result.matched, result.ai_score)

        with unit_of_work() as session:
            submission = Submission(
                student_id=student.id,
                task_id=task.id,
                image_url=image_url,
                status=status,
                labels=result.labels,
                ai_score=result.ai_score,
            )
            session.add(submission)
            if status == SubmissionStatus.APPROVED:
                ledger.credit(student.id, task.points)
    except Exception:
        blob_store.delete(image_url)
        raise

    logging.info(
        f"Submission {submission.id} by account {student_id} for task {task_id}: "
        f"status={status.value}, ai_score={result.ai_score}, matched={result.matched_labels}"
    )
    return submission


def _current_status(submission: Submission) -> SubmissionStatus:
    db.session.refresh(submission, attribute_names=['status'])
    return submission.status


def review_submission(admin_id, submission_id, new_status) -> Submission:
    """
    Applies an admin decision to a submission.

    Approving a submission that is not already approved credits the task's
    points; approving it again is a no-op for points. Rejecting an approved
    submission keeps the points already credited.
    """
    requested = SubmissionStatus.parse(new_status)
    if requested not in REVIEW_STATUSES:
        raise InvalidStatusError()

    for attempt in range(1, REVIEW_MAX_ATTEMPTS + 1):
        submission = db.session.get(Submission, submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")

        current = _current_status(submission)

        with unit_of_work() as session:
            result = session.execute(
                update(Submission)
                .where(Submission.id == submission_id, Submission.status == current)
                .values(status=requested, reviewed_by=admin_id, reviewed_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            applied = result.rowcount == 1
            if applied and credits_on_review(current, requested):
                ledger.credit(submission.student_id, submission.task.points)

        if applied:
            if current == SubmissionStatus.APPROVED and requested == SubmissionStatus.REJECTED:
                logging.warning(
                    f"Submission {submission_id} rejected after approval by admin {admin_id}; "
                    f"previously credited points are not debited"
                )
            logging.info(f"Admin {admin_id} reviewed submission {submission_id}: {current.value} -> {requested.value}")
            return submission

        logging.warning(f"Submission {submission_id} changed status during review (attempt {attempt}), re-reading")

    raise ConflictError("Submission was modified concurrently, please retry")


def list_submissions() -> List[Submission]:
    """All submissions with their student and task, oldest first."""
    try:
        query = (
            select(Submission)
            .options(joinedload(Submission.student), joinedload(Submission.task))
            .order_by(Submission.created_at, Submission.id)
        )
        return list(db.session.execute(query).scalars().all())
    except SQLAlchemyError as e:
        logging.error(f"Failed to list submissions: {e}", exc_info=True)
        raise StorageError("Database operation failed") from e
