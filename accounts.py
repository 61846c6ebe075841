import datetime
import logging
from typing import NamedTuple

import jwt
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from errors import DuplicateEmailError, NotFoundError, StorageError, UnauthorizedError
from models import db, unit_of_work, Account, Role

security_logger = logging.getLogger('security')

# Checked when the email is unknown so both failure paths cost one hash.
_DUMMY_HASH = generate_password_hash('dummy-password-for-timing')


class Identity(NamedTuple):
    account_id: int
    role: Role
    name: str


def log_security_event(event_type, details=None):
    security_logger.warning(f"SECURITY_EVENT: {event_type} - {details or {}}")


def _find_by_email(email):
    return db.session.execute(select(Account).where(Account.email == email)).scalar_one_or_none()


def register_account(name, email, password, role=None) -> Account:
    """Creates an account; only an explicit 'admin' role yields an admin."""
    email = email.strip().lower()
    if _find_by_email(email) is not None:
        log_security_event('REGISTRATION_DUPLICATE_EMAIL', {'email': email})
        raise DuplicateEmailError()

    account = Account(
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        role=Role.ADMIN if role == Role.ADMIN.value else Role.STUDENT,
        points=0,
        badges=[],
    )
    try:
        with unit_of_work() as session:
            session.add(account)
    except StorageError as e:
        # Lost a race with a concurrent registration for the same email
        if isinstance(e.__cause__, IntegrityError):
            raise DuplicateEmailError() from e
        raise

    log_security_event('USER_REGISTERED', {'account_id': account.id, 'role': account.role.value})
    return account


def issue_token(account: Account) -> str:
    ttl_days = current_app.config['TOKEN_TTL_DAYS']
    payload = {
        'user_id': account.id,
        'role': account.role.value,
        'name': account.name,
        'exp': datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=ttl_days),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEYS'][0], algorithm='HS256')


def authenticate(email, password) -> dict:
    """Checks credentials and returns {token, role, name}."""
    account = _find_by_email(email.strip().lower())
    if account is not None:
        password_valid = check_password_hash(account.password_hash, password)
    else:
        check_password_hash(_DUMMY_HASH, password)
        password_valid = False

    if not password_valid:
        log_security_event('USER_LOGIN_FAILED', {'email': email})
        raise UnauthorizedError("Invalid credentials")

    log_security_event('USER_LOGIN_SUCCESS', {'account_id': account.id})
    return {'token': issue_token(account), 'role': account.role.value, 'name': account.name}


def decode_token(token) -> Identity:
    """
    Resolves a bearer token to the caller's identity.
    Every configured secret is tried in order so tokens signed with a
    previous or upcoming key stay valid during rotation. Raises
    jwt.InvalidTokenError when no key accepts the token.
    """
    last_error = jwt.InvalidTokenError("No signing keys configured")
    for key in current_app.config['JWT_SECRET_KEYS']:
        try:
            data = jwt.decode(token, key, algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            raise
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
        try:
            return Identity(int(data['user_id']), Role(data['role']), data.get('name', ''))
        except (KeyError, TypeError, ValueError) as e:
            raise jwt.InvalidTokenError("Malformed token payload") from e
    raise last_error


def get_account(account_id) -> Account:
    account = db.session.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account not found")
    return account
