from flask import Blueprint, jsonify, request

from truenorth.api import get_engine, require_str, require_uuid

players = Blueprint('players', __name__)


@players.route('', methods=['POST'])
@players.route('/', methods=['POST'])
def register_player():
    data = request.get_json(silent=True) or {}
    nickname = require_str(data, 'nickname', max_len=30)
    device_id = require_uuid(data, 'deviceId')
    player_id = get_engine().players.register(nickname, device_id)
    return jsonify({'playerId': player_id})
