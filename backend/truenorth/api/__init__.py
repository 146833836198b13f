import uuid

from flask import current_app, jsonify

from truenorth.services.trivia.errors import TriviaError, ValidationError


def get_engine():
    return current_app.extensions['truenorth']


def register_error_handlers(flask_app) -> None:
    @flask_app.errorhandler(TriviaError)
    def handle_trivia_error(exc):
        if exc.status_code >= 500:
            current_app.logger.error(f"[error] kind={exc.kind} {exc.message}")
        else:
            current_app.logger.info(f"[rejected] kind={exc.kind} {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code


def require_uuid(data, field):
    value = data.get(field)
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a UUID', field=field) from None


def require_str(data, field, max_len=64):
    value = data.get(field)
    if not isinstance(value, str) or not value or len(value) > max_len:
        raise ValidationError(f'{field} is required', field=field)
    return value


def require_int(data, field, low, high):
    value = data.get(field)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValidationError(f'{field} must be an integer in [{low}, {high}]', field=field)
    return value
