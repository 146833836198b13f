import logging

from .errors import AdminAuthError, QuestionNotFound, SessionNotFound, ValidationError
from .notifier import LEADERBOARD_TOPIC

logger = logging.getLogger(__name__)

ACTIONS = ('reset_daily', 'reset_all', 'delete_session', 'toggle_question')


class AdminConsole:
    """Shared-secret admin actions. Every action ends with a leaderboard
    notification so open boards re-fetch."""

    def __init__(self, store, leaderboard, notifier, check=None):
        self.store = store
        self.leaderboard = leaderboard
        self.notifier = notifier
        self._check = check

    def authorize(self, code) -> None:
        if not isinstance(code, str) or not code or self._check is None or not self._check(code):
            logger.warning("[admin-denied] invalid admin code")
            raise AdminAuthError()

    def perform(self, code, action, session_id=None, question_id=None) -> str:
        self.authorize(code)
        if action == 'reset_daily':
            self.leaderboard.reset_day()
            return 'Daily leaderboard reset'
        if action == 'reset_all':
            self.leaderboard.reset_all()
            return 'All leaderboard entries cleared'
        if action == 'delete_session' and session_id:
            if not self.leaderboard.remove_session(session_id):
                raise SessionNotFound(session_id)
            return 'Session deleted from leaderboard'
        if action == 'toggle_question' and question_id:
            question = self.toggle_question(question_id)
            return f"Question {'activated' if question.active else 'deactivated'}"
        raise ValidationError('Invalid action', action=action)

    def toggle_question(self, question_id):
        with self.store.transaction():
            current = self.store.get_question(question_id)
            if current is None:
                raise QuestionNotFound(question_id)
            question = self.store.set_question_active(question_id, not current.active)
        logger.info(f"[question-toggle] question={question_id} active={question.active}")
        self.notifier.publish(LEADERBOARD_TOPIC)
        return question

    def questions(self, code):
        self.authorize(code)
        return self.store.list_questions()

    def leaderboard_entries(self, code, limit=200):
        self.authorize(code)
        return self.leaderboard.admin_listing(limit)
