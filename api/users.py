from flask import Blueprint, jsonify

from accounts import get_account
from .auth import token_required
from .pydantic_models import ProfileResponse

users_bp = Blueprint('users_bp', __name__)

@users_bp.route('/me', methods=['GET'])
@token_required
def get_my_profile(user_id):
    account = get_account(user_id)
    profile = ProfileResponse(
        id=account.id,
        name=account.name,
        email=account.email,
        role=account.role.value,
        points=account.points,
        badges=list(account.badges or []),
    )
    return jsonify(profile.model_dump()), 200
