import logging
from typing import List, NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from errors import StorageError
from models import db, Account, Role


class LeaderboardEntry(NamedTuple):
    name: str
    points: int
    badges: List[str]


def leaderboard(limit: Optional[int] = None) -> List[LeaderboardEntry]:
    """
    Students ranked by points, highest first.
    Equal points keep registration order (account id ascending). Admin
    accounts never appear regardless of their points.
    """
    query = (
        select(Account)
        .where(Account.role == Role.STUDENT)
        .order_by(Account.points.desc(), Account.id.asc())
    )
    if limit is not None:
        query = query.limit(limit)

    try:
        accounts = db.session.execute(query).scalars().all()
    except SQLAlchemyError as e:
        logging.error(f"Failed to build leaderboard: {e}", exc_info=True)
        raise StorageError("Database operation failed") from e

    return [LeaderboardEntry(a.name, a.points, list(a.badges or [])) for a in accounts]
