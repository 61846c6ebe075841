import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from errors import InvalidInputError, StorageError
from models import db, unit_of_work, Task


def create_task(admin_id, title, description='', category='', points=0, expected_labels=None, deadline=None) -> Task:
    """Adds a task to the catalog. Tasks are never edited after creation."""
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise InvalidInputError("Task points must be a positive integer")
    if not title:
        raise InvalidInputError("Task title is required")

    task = Task(
        title=title,
        description=description or '',
        category=category or '',
        points=points,
        expected_labels=[label for label in (expected_labels or []) if label],
        deadline=deadline,
        is_active=True,
        created_by=admin_id,
    )
    with unit_of_work() as session:
        session.add(task)

    logging.info(f"Admin {admin_id} created task {task.id} '{task.title}' worth {task.points} points")
    return task


def list_active_tasks() -> List[Task]:
    try:
        query = select(Task).where(Task.is_active.is_(True)).order_by(Task.id)
        return list(db.session.execute(query).scalars().all())
    except SQLAlchemyError as e:
        logging.error(f"Failed to list tasks: {e}", exc_info=True)
        raise StorageError("Database operation failed") from e

