from flask import Blueprint, current_app, jsonify, request

from truenorth.api import get_engine
from truenorth.services.trivia.admin import ACTIONS
from truenorth.services.trivia.errors import ValidationError

admin = Blueprint('admin', __name__)


@admin.route('/reset', methods=['POST'])
def admin_action():
    data = request.get_json(silent=True) or {}
    action = data.get('action')
    if action not in ACTIONS:
        raise ValidationError('Invalid action', action=action)
    message = get_engine().admin.perform(
        data.get('code'),
        action,
        session_id=data.get('sessionId'),
        question_id=data.get('questionId'),
    )
    current_app.logger.info(f"[admin] action={action}")
    return jsonify({'success': True, 'message': message})


@admin.route('/leaderboard', methods=['GET'])
def admin_leaderboard():
    limit = current_app.config.get('ADMIN_LEADERBOARD_LIMIT', 200)
    rows = get_engine().admin.leaderboard_entries(request.args.get('code'), limit)
    return jsonify({'entries': [row.to_dict() for row in rows]})


@admin.route('/questions', methods=['GET'])
def admin_questions():
    questions = get_engine().admin.questions(request.args.get('code'))
    return jsonify({'questions': [
        {
            'id': q.id,
            'prompt': q.prompt,
            'answer': q.label,
            'explanation': q.explanation,
            'tags': ','.join(sorted(q.tags)),
            'image_url': q.image_url,
            'active': q.active,
        }
        for q in questions
    ]})
