from typing import Iterable

from .records import ScoreBreakdown

BASE_POINTS = 100
TIME_BONUS_MAX = 50
TIME_BONUS_WINDOW_MS = 6000
STREAK_STEP = 10
STREAK_BONUS_CAP = 50


def score_answer(correct: bool, latency_ms: int, streak: int) -> ScoreBreakdown:
    """Points for one answer.

    A miss is always worth 0. A hit earns 100 base points, a time bonus
    decaying linearly from 50 at 0 ms to 0 at 6000 ms, and +10 per streak
    step capped at 50. ``streak`` is the streak including this answer.
    """
    if not correct:
        return ScoreBreakdown()
    # floor(50 * (1 - latency / 6000)) in integer arithmetic
    time_bonus = max(0, (TIME_BONUS_MAX * (TIME_BONUS_WINDOW_MS - latency_ms)) // TIME_BONUS_WINDOW_MS)
    streak_bonus = min(STREAK_BONUS_CAP, streak * STREAK_STEP)
    return ScoreBreakdown(base=BASE_POINTS, time_bonus=time_bonus, streak_bonus=streak_bonus)


def points(correct: bool, latency_ms: int, streak: int) -> int:
    return score_answer(correct, latency_ms, streak).total


def current_streak(answers_desc: Iterable) -> int:
    """Length of the run of correct answers ending at the most recent one.

    ``answers_desc`` must be ordered by order_index, most recent first.
    """
    streak = 0
    for answer in answers_desc:
        if not answer.correct:
            break
        streak += 1
    return streak


def next_streak(prior: int, correct: bool) -> int:
    return prior + 1 if correct else 0


def format_duration(ms: int) -> str:
    seconds = ms // 1000
    minutes, remaining = divmod(seconds, 60)
    if minutes > 0:
        return f"{minutes}:{remaining:02d}"
    return f"{seconds}s"
