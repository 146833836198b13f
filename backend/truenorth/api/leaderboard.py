from flask import Blueprint, current_app, jsonify, request

from truenorth.api import get_engine
from truenorth.services.trivia.leaderboard import PERIOD_ALL, PERIOD_TODAY

leaderboard = Blueprint('leaderboard', __name__)

MAX_LIMIT = 100


@leaderboard.route('', methods=['GET'])
@leaderboard.route('/', methods=['GET'])
def get_leaderboard():
    period = PERIOD_ALL if request.args.get('period') == PERIOD_ALL else PERIOD_TODAY
    try:
        limit = int(request.args.get('limit', current_app.config.get('LEADERBOARD_LIMIT', 50)))
    except (TypeError, ValueError):
        limit = current_app.config.get('LEADERBOARD_LIMIT', 50)
    limit = max(1, min(MAX_LIMIT, limit))
    rows = get_engine().leaderboard.top(period, limit)
    return jsonify({'entries': [row.to_dict() for row in rows], 'period': period})
