import logging
from functools import wraps
from flask import Blueprint, request, jsonify
import jwt

from accounts import authenticate, decode_token, register_account, log_security_event
from extensions import limiter
from .error_utils import unauthorized_error, forbidden_error
from .pydantic_models import RegisterRequest, LoginRequest, LoginResponse

auth_bp = Blueprint('auth_bp', __name__)

def token_required(f=None, *, roles=None):
    """
    Resolves the bearer token into `user_id` for the wrapped view.
    With `roles`, callers holding any other role are refused with 403.
    """
    allowed = {getattr(r, 'value', r) for r in (roles or [])}

    def decorator(view):
        @wraps(view)
        def decorated(*args, **kwargs):
            auth_header = request.headers.get('Authorization')
            if not auth_header or not auth_header.startswith('Bearer '):
                return unauthorized_error(error_code="TOKEN_MISSING")
            token = auth_header.split(' ', 1)[1]
            try:
                identity = decode_token(token)
            except jwt.InvalidTokenError as e:
                logging.info(f"Rejected token: {e}")
                return unauthorized_error(error_code="TOKEN_INVALID")
            if allowed and identity.role.value not in allowed:
                log_security_event('ROLE_FORBIDDEN', {'account_id': identity.account_id, 'path': request.path})
                return forbidden_error()
            kwargs['user_id'] = identity.account_id
            return view(*args, **kwargs)
        return decorated

    if f is not None:
        return decorator(f)
    return decorator

# --- Endpoints ---
@auth_bp.route('/register', methods=['POST'])
@limiter.limit("5 per hour")
def register():
    req_data = RegisterRequest.model_validate(request.get_json(silent=True))
    account = register_account(req_data.name, req_data.email, req_data.password, req_data.role)
    return jsonify({"message": "Registered", "userId": account.id}), 201

@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    req_data = LoginRequest.model_validate(request.get_json(silent=True))
    result = authenticate(req_data.email, req_data.password)
    return jsonify(LoginResponse(**result).model_dump()), 200
