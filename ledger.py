"""
Reward ledger: the only writer of Account.points and Account.badges.

Points only ever go up, through credit(). Badges are re-derived from the
running total after every credit, so the stored badge list always equals the
thresholds the account has crossed.
"""

import logging
from typing import Iterable, List

from sqlalchemy import update

from errors import InvalidInputError, NotFoundError
from models import db, Account

# Ascending; each entry is awarded once points reach the threshold.
BADGE_THRESHOLDS = [
    (50, 'Green Beginner'),
    (200, 'Eco Warrior'),
]


def derive_badges(points: int, earned: Iterable[str] = ()) -> List[str]:
    """
    Returns the badges for a points total, lowest threshold first.
    Badges already in `earned` are kept even if the total no longer reaches
    them.
    """
    earned = set(earned or ())
    return [name for threshold, name in BADGE_THRESHOLDS if points >= threshold or name in earned]


def credit(account_id: int, amount: int) -> Account:
    """
    Adds `amount` points to an account inside the caller's transaction.
    The increment is done in SQL so concurrent credits to the same account
    cannot lose an update.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidInputError("Credit amount must be a positive integer")

    result = db.session.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(points=Account.points + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError("Account not found")

    account = db.session.get(Account, account_id)
    db.session.refresh(account, attribute_names=['points', 'badges'])
    account.badges = derive_badges(account.points, account.badges)

    logging.info(f"Credited {amount} points to account {account_id}; total={account.points}, badges={account.badges}")
    return account
