import logging
import uuid
from contextlib import nullcontext

from .errors import (
    PlayerNotFound,
    QuestionNotFound,
    DuplicateAnswer,
    SessionNotFound,
    ValidationError,
)
from .leaderboard import now_ms
from .locks import KeyedLocks
from .notifier import LEADERBOARD_TOPIC
from .records import (
    LABELS,
    MAX_LATENCY_MS,
    Answer,
    AnswerResult,
    FinishResult,
    LeaderboardEntry,
    Session,
    StartResult,
)
from .scoring import current_streak, next_streak, score_answer

logger = logging.getLogger(__name__)

DEFAULT_SHARE_TEXT = 'I scored {score} points on True North or Not! Can you beat my score?'


class SessionManager:
    """Lifecycle of a play-through: start, answer, finish.

    A session is open while ``end_time`` is None and finished afterwards;
    nothing leaves the finished state. Each operation runs in one store
    transaction under the in-process locks for the device, session and day
    bucket it touches, always acquired in that order.
    """

    def __init__(self, store, assembler, leaderboard, notifier, clock=None, share_text=None, locks=None):
        self.store = store
        self.assembler = assembler
        self.leaderboard = leaderboard
        self.notifier = notifier
        self.clock = clock or now_ms
        self.share_text = share_text or DEFAULT_SHARE_TEXT
        self._locks = locks if locks is not None else KeyedLocks()

    def _session_lock(self, session_id):
        return self._locks.hold(f"session:{session_id}")

    def start(self, player_id: str, device_id: str) -> StartResult:
        with self._locks.hold(f"device:{device_id}"):
            stale = self.store.open_session_for_device(device_id)
            with self._session_lock(stale.id) if stale else nullcontext():
                with self.store.transaction():
                    if self.store.get_player(player_id) is None:
                        raise PlayerNotFound(player_id)

                    stale = self.store.open_session_for_device(device_id)
                    if stale is not None and self.store.count_answers(stale.id) == 0:
                        # Client retry before any answer: same session, the
                        # deck is not persisted so a fresh one is dealt.
                        logger.info(f"[session-reuse] session={stale.id} device={device_id}")
                        return StartResult(stale.id, self.assembler.assemble(), resumed=True)

                    deck = self.assembler.assemble()
                    now = self.clock()
                    if stale is not None:
                        self.store.close_session(stale.id, now, now - stale.start_time)
                        logger.info(f"[session-abandon] session={stale.id} device={device_id}")

                    session = Session(
                        id=str(uuid.uuid4()),
                        player_id=player_id,
                        device_id=device_id,
                        start_time=now,
                    )
                    self.store.create_session(session)
        logger.info(f"[session-start] session={session.id} player={player_id} device={device_id}")
        return StartResult(session.id, deck)

    def submit_answer(self, session_id: str, question_id: str, latency_ms: int, guess: str) -> AnswerResult:
        if isinstance(latency_ms, bool) or not isinstance(latency_ms, int) or not 0 <= latency_ms <= MAX_LATENCY_MS:
            raise ValidationError(f'latencyMs must be an integer in [0, {MAX_LATENCY_MS}]', field='latencyMs')
        if guess not in LABELS:
            raise ValidationError(f"guess must be one of {', '.join(LABELS)}", field='guess')

        with self._session_lock(session_id):
            with self.store.transaction():
                if self.store.get_open_session(session_id) is None:
                    raise SessionNotFound(session_id)
                question = self.store.get_question(question_id)
                if question is None:
                    raise QuestionNotFound(question_id)
                if self.store.has_answer(session_id, question_id):
                    raise DuplicateAnswer(session_id, question_id)

                correct = guess == question.label
                prior = self.store.answers_for_session(session_id)
                streak = next_streak(current_streak(prior), correct)
                breakdown = score_answer(correct, latency_ms, streak)

                self.store.insert_answer(Answer(
                    session_id=session_id,
                    question_id=question_id,
                    correct=correct,
                    latency_ms=latency_ms,
                    order_index=len(prior),
                ))
                running = self.store.increment_score(session_id, breakdown.total)

        logger.info(
            f"[answer] session={session_id} question={question_id} correct={correct} "
            f"points={breakdown.total} streak={streak} score={running}"
        )
        return AnswerResult(
            correct=correct,
            true_label=question.label,
            explanation=question.explanation,
            points_awarded=breakdown.total,
            streak=streak,
            running_score=running,
            breakdown=breakdown,
        )

    def finish(self, session_id: str) -> FinishResult:
        with self._session_lock(session_id):
            if self.store.get_open_session(session_id) is None:
                raise SessionNotFound(session_id)
            now = self.clock()
            day = self.leaderboard.day_bucket(now)
            with self.leaderboard.bucket_lock(day):
                with self.store.transaction():
                    session = self.store.get_open_session(session_id)
                    if session is None:
                        raise SessionNotFound(session_id)
                    duration = now - session.start_time
                    self.store.close_session(session_id, now, duration)
                    rank = self.leaderboard.record(LeaderboardEntry(
                        day=day,
                        session_id=session_id,
                        player_id=session.player_id,
                        score=session.score,
                        duration_ms=duration,
                        finished_at=now,
                    ))

        logger.info(f"[session-finish] session={session_id} day={day} score={session.score} rank={rank}")
        self.notifier.publish(LEADERBOARD_TOPIC)
        return FinishResult(
            score=session.score,
            duration_ms=duration,
            rank=rank,
            share_text=self.share_text.format(score=session.score),
            day=day,
        )
