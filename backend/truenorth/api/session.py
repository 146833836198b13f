from flask import Blueprint, current_app, jsonify, request

from truenorth.api import get_engine, require_int, require_str, require_uuid
from truenorth.services.trivia.records import LABELS, MAX_LATENCY_MS
from truenorth.services.trivia.errors import ValidationError

sessions = Blueprint('sessions', __name__)


@sessions.route('/start', methods=['POST'])
def start_session():
    data = request.get_json(silent=True) or {}
    player_id = require_uuid(data, 'playerId')
    device_id = require_uuid(data, 'deviceId')
    current_app.logger.info(f"[start] player={player_id} device={device_id}")
    result = get_engine().sessions.start(player_id, device_id)
    return jsonify(result.to_dict())


@sessions.route('/answer', methods=['POST'])
def submit_answer():
    data = request.get_json(silent=True) or {}
    session_id = require_uuid(data, 'sessionId')
    question_id = require_str(data, 'questionId')
    latency_ms = require_int(data, 'latencyMs', 0, MAX_LATENCY_MS)
    guess = data.get('guess')
    if guess not in LABELS:
        raise ValidationError(f"guess must be one of {', '.join(LABELS)}", field='guess')
    result = get_engine().sessions.submit_answer(session_id, question_id, latency_ms, guess)
    return jsonify(result.to_dict())


@sessions.route('/finish', methods=['POST'])
def finish_session():
    data = request.get_json(silent=True) or {}
    session_id = require_uuid(data, 'sessionId')
    result = get_engine().sessions.finish(session_id)
    return jsonify(result.to_dict())
