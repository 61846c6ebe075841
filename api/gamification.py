from flask import Blueprint, request, jsonify

from extensions import limiter
from leaderboard import leaderboard
from .auth import token_required
from .error_utils import bad_request_error
from .pydantic_models import LeaderboardEntryResponse

gamification_bp = Blueprint('gamification_bp', __name__)

MAX_LEADERBOARD_LIMIT = 500

@gamification_bp.route('/leaderboard', methods=['GET'])
@token_required
@limiter.exempt
def get_leaderboard(user_id):
    """
    Students ranked by points. Ties keep registration order.
    Optional `limit` query parameter caps the number of rows.
    """
    limit = request.args.get('limit', type=int)
    if limit is not None and not 0 < limit <= MAX_LEADERBOARD_LIMIT:
        return bad_request_error(f"limit must be between 1 and {MAX_LEADERBOARD_LIMIT}")

    entries = leaderboard(limit)
    return jsonify([LeaderboardEntryResponse(**e._asdict()).model_dump() for e in entries]), 200
