"""Error taxonomy for the trivia core.

Each error carries a ``kind`` (not_found, conflict, validation,
insufficient_content, forbidden) that the transport maps to a status code,
plus a small ``context`` dict naming the id or constraint involved.
"""


class TriviaError(Exception):
    kind = 'error'
    status_code = 500

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self):
        payload = {'error': self.message, 'kind': self.kind}
        payload.update(self.context)
        return payload


class NotFound(TriviaError):
    kind = 'not_found'
    status_code = 404


class PlayerNotFound(NotFound):
    def __init__(self, player_id):
        super().__init__('Player not found', playerId=player_id)


class SessionNotFound(NotFound):
    def __init__(self, session_id):
        super().__init__('Session not found or already finished', sessionId=session_id)


class QuestionNotFound(NotFound):
    def __init__(self, question_id):
        super().__init__('Question not found', questionId=question_id)


class Conflict(TriviaError):
    kind = 'conflict'
    status_code = 409


class DuplicateAnswer(Conflict):
    def __init__(self, session_id, question_id):
        super().__init__('Question already answered', sessionId=session_id, questionId=question_id)


class ValidationError(TriviaError):
    kind = 'validation'
    status_code = 400


class InsufficientContent(TriviaError):
    kind = 'insufficient_content'
    status_code = 503

    def __init__(self, label, available, required):
        super().__init__(
            f'Not enough active {label} questions ({available}/{required} available)',
            label=label, available=available, required=required,
        )


class AdminAuthError(TriviaError):
    kind = 'forbidden'
    status_code = 403

    def __init__(self):
        super().__init__('Invalid admin code')
