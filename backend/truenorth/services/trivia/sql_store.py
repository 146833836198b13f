import threading
from contextlib import contextmanager

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError

from truenorth.models import GameSession, LeaderboardEntry, Player, Question, SessionAnswer
from .errors import DuplicateAnswer
from .store import TriviaStore


class SqlTriviaStore(TriviaStore):
    """Flask-SQLAlchemy backed store. Must be used inside an app context."""

    def __init__(self, db):
        self.db = db
        self._local = threading.local()

    @property
    def session(self):
        return self.db.session

    @contextmanager
    def transaction(self):
        depth = getattr(self._local, 'depth', 0)
        self._local.depth = depth + 1
        try:
            yield
            if depth == 0:
                self.session.commit()
        except Exception:
            if depth == 0:
                self.session.rollback()
            raise
        finally:
            self._local.depth = depth

    # players
    def get_player(self, player_id):
        row = Player.query.get(player_id)
        return row.to_record() if row else None

    def find_player_by_device(self, device_id):
        row = Player.query.filter_by(device_id=device_id).order_by(Player.created_at.desc()).first()
        return row.to_record() if row else None

    def add_player(self, player):
        self.session.add(Player(
            id=player.id,
            nickname=player.nickname,
            device_id=player.device_id,
            created_at=player.created_at,
        ))
        self.session.flush()

    def rename_player(self, player_id, nickname):
        Player.query.filter_by(id=player_id).update({'nickname': nickname})

    # questions
    def get_question(self, question_id):
        row = Question.query.get(question_id)
        return row.to_record() if row else None

    def active_questions(self, label):
        return [q.to_record() for q in Question.query.filter_by(label=label, active=True).all()]

    def list_questions(self):
        return [q.to_record() for q in Question.query.order_by(Question.prompt.asc()).all()]

    def add_question(self, question):
        self.session.add(Question(
            id=question.id,
            prompt=question.prompt,
            label=question.label,
            explanation=question.explanation,
            image_url=question.image_url,
            tags=','.join(sorted(question.tags)),
            active=question.active,
        ))
        self.session.flush()

    def set_question_active(self, question_id, active):
        row = Question.query.get(question_id)
        if row is None:
            return None
        row.active = active
        self.session.add(row)
        self.session.flush()
        return row.to_record()

    # sessions
    def get_session(self, session_id):
        row = GameSession.query.get(session_id)
        return row.to_record() if row else None

    def get_open_session(self, session_id):
        row = GameSession.query.filter_by(id=session_id, end_time=None).first()
        return row.to_record() if row else None

    def open_session_for_device(self, device_id):
        row = (
            GameSession.query.filter_by(device_id=device_id, end_time=None)
            .order_by(GameSession.start_time.desc())
            .first()
        )
        return row.to_record() if row else None

    def create_session(self, session):
        self.session.add(GameSession(
            id=session.id,
            player_id=session.player_id,
            device_id=session.device_id,
            start_time=session.start_time,
            score=session.score,
            question_count=session.question_count,
        ))
        self.session.flush()

    def close_session(self, session_id, end_time, duration_ms):
        GameSession.query.filter_by(id=session_id).update(
            {'end_time': end_time, 'duration_ms': duration_ms}
        )

    def delete_session(self, session_id):
        LeaderboardEntry.query.filter_by(session_id=session_id).delete()
        SessionAnswer.query.filter_by(session_id=session_id).delete()
        return GameSession.query.filter_by(id=session_id).delete() > 0

    # answers
    def answers_for_session(self, session_id):
        rows = (
            SessionAnswer.query.filter_by(session_id=session_id)
            .order_by(SessionAnswer.order_index.desc())
            .all()
        )
        return [r.to_record() for r in rows]

    def count_answers(self, session_id):
        return SessionAnswer.query.filter_by(session_id=session_id).count()

    def has_answer(self, session_id, question_id):
        return SessionAnswer.query.filter_by(session_id=session_id, question_id=question_id).first() is not None

    def insert_answer(self, answer):
        self.session.add(SessionAnswer(
            session_id=answer.session_id,
            question_id=answer.question_id,
            correct=answer.correct,
            latency_ms=answer.latency_ms,
            order_index=answer.order_index,
        ))
        try:
            self.session.flush()
        except IntegrityError:
            # Another writer got there first; the failed flush poisons the
            # session, so roll back before looking at committed state.
            self.session.rollback()
            if self.has_answer(answer.session_id, answer.question_id):
                raise DuplicateAnswer(answer.session_id, answer.question_id) from None
            raise

    def increment_score(self, session_id, points):
        self.session.execute(
            update(GameSession)
            .where(GameSession.id == session_id)
            .values(score=GameSession.score + points)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(
            select(GameSession.score).where(GameSession.id == session_id)
        ).scalar_one()

    # leaderboard
    def insert_entry(self, entry):
        self.session.add(LeaderboardEntry(
            day=entry.day,
            session_id=entry.session_id,
            player_id=entry.player_id,
            score=entry.score,
            duration_ms=entry.duration_ms,
            finished_at=entry.finished_at,
            rank=entry.rank,
        ))
        self.session.flush()

    def entry_for_session(self, session_id):
        row = LeaderboardEntry.query.filter_by(session_id=session_id).first()
        return row.to_record() if row else None

    def entries_for_day(self, day):
        rows = (
            LeaderboardEntry.query.filter_by(day=day)
            .order_by(*LeaderboardEntry.standing_order())
            .all()
        )
        return [r.to_record() for r in rows]

    def set_ranks(self, day, ranks):
        for session_id, rank in ranks:
            LeaderboardEntry.query.filter_by(day=day, session_id=session_id).update({'rank': rank})
        self.session.flush()

    def count_ahead(self, day, score, duration_ms, finished_at, session_id):
        E = LeaderboardEntry
        same_score = E.score == score
        same_time = and_(same_score, E.duration_ms == duration_ms)
        return E.query.filter(
            E.day == day,
            or_(
                E.score > score,
                and_(same_score, E.duration_ms < duration_ms),
                and_(same_time, E.finished_at < finished_at),
                and_(same_time, E.finished_at == finished_at, E.session_id < session_id),
            ),
        ).count()

    def _with_nicknames(self):
        return self.session.query(LeaderboardEntry, Player.nickname).join(
            Player, LeaderboardEntry.player_id == Player.id
        )

    def ranked_entries(self, day, limit):
        query = self._with_nicknames()
        if day is not None:
            query = query.filter(LeaderboardEntry.day == day)
        rows = query.order_by(*LeaderboardEntry.standing_order()).limit(limit).all()
        return [(entry.to_record(), nickname) for entry, nickname in rows]

    def recent_entries(self, limit):
        rows = (
            self.session.query(LeaderboardEntry, Player.nickname, GameSession.start_time)
            .join(Player, LeaderboardEntry.player_id == Player.id)
            .outerjoin(GameSession, LeaderboardEntry.session_id == GameSession.id)
            .order_by(LeaderboardEntry.day.desc(), *LeaderboardEntry.standing_order())
            .limit(limit)
            .all()
        )
        return [(entry.to_record(), nickname, start_time) for entry, nickname, start_time in rows]

    def delete_entries(self, day=None):
        query = LeaderboardEntry.query
        if day is not None:
            query = query.filter_by(day=day)
        return query.delete()
