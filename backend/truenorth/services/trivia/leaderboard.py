import logging
import time
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from .locks import KeyedLocks
from .notifier import LEADERBOARD_TOPIC
from .records import LeaderboardEntry, StandingRow

logger = logging.getLogger(__name__)

PERIOD_TODAY = 'today'
PERIOD_ALL = 'all'
PERIODS = (PERIOD_TODAY, PERIOD_ALL)


def now_ms() -> int:
    return int(time.time() * 1000)


def resolve_tz(name: str):
    if not name or name.upper() == 'UTC':
        return timezone.utc
    return ZoneInfo(name)


class Leaderboard:
    """Daily and all-time standings of finished sessions.

    Standings are ordered by score (desc), duration (asc), finish time (asc)
    and finally session id, so ranks are always distinct and reproducible.
    Writers to a day bucket must hold ``bucket_lock(day)`` around
    "insert entry + recompute ranks".
    """

    def __init__(self, store, notifier, clock=None, tz='UTC', locks=None):
        self.store = store
        self.notifier = notifier
        self.clock = clock or now_ms
        self.tz = resolve_tz(tz)
        self._locks = locks if locks is not None else KeyedLocks()

    def day_bucket(self, epoch_ms: Optional[int] = None) -> str:
        if epoch_ms is None:
            epoch_ms = self.clock()
        return datetime.fromtimestamp(epoch_ms / 1000, tz=self.tz).strftime('%Y-%m-%d')

    def bucket_lock(self, day: str):
        return self._locks.hold(f"day:{day}")

    def session_lock(self, session_id: str):
        return self._locks.hold(f"session:{session_id}")

    def recompute_ranks(self, day: str) -> int:
        entries = self.store.entries_for_day(day)
        self.store.set_ranks(day, [(e.session_id, i) for i, e in enumerate(entries, start=1)])
        logger.info(f"[rerank] day={day} entries={len(entries)}")
        return len(entries)

    def estimate_rank(self, day: str, score: int, duration_ms: int,
                      finished_at: int, session_id: str) -> int:
        return 1 + self.store.count_ahead(day, score, duration_ms, finished_at, session_id)

    def record(self, entry: LeaderboardEntry) -> int:
        """Insert a finished session and re-rank its bucket; returns its rank.

        Caller holds ``bucket_lock(entry.day)`` and an open store transaction.
        """
        rank = self.estimate_rank(entry.day, entry.score, entry.duration_ms,
                                  entry.finished_at, entry.session_id)
        self.store.insert_entry(entry)
        self.recompute_ranks(entry.day)
        return rank

    def top(self, period: str = PERIOD_TODAY, limit: int = 50) -> List[StandingRow]:
        if period == PERIOD_ALL:
            rows = self.store.ranked_entries(None, limit)
            return [_row(entry, nickname, position) for position, (entry, nickname) in enumerate(rows, start=1)]
        rows = self.store.ranked_entries(self.day_bucket(), limit)
        return [_row(entry, nickname, entry.rank) for entry, nickname in rows]

    def admin_listing(self, limit: int = 200) -> List[StandingRow]:
        return [
            _row(entry, nickname, entry.rank, with_day=True, start_time=start_time)
            for entry, nickname, start_time in self.store.recent_entries(limit)
        ]

    def reset_day(self, day: Optional[str] = None) -> int:
        day = day or self.day_bucket()
        with self.bucket_lock(day):
            with self.store.transaction():
                removed = self.store.delete_entries(day)
        logger.info(f"[reset-day] day={day} removed={removed}")
        self.notifier.publish(LEADERBOARD_TOPIC)
        return removed

    def reset_all(self) -> int:
        with self.store.transaction():
            removed = self.store.delete_entries(None)
        logger.info(f"[reset-all] removed={removed}")
        self.notifier.publish(LEADERBOARD_TOPIC)
        return removed

    def remove_session(self, session_id: str) -> bool:
        """Delete a session with its answers and entry, closing the rank gap.

        Holds the session lock throughout, so a concurrent ``finish`` either
        lands its entry before the lookup or finds the session gone.
        """
        with self.session_lock(session_id):
            entry = self.store.entry_for_session(session_id)
            day = entry.day if entry else None
            with self.bucket_lock(day) if day else nullcontext():
                with self.store.transaction():
                    removed = self.store.delete_session(session_id)
                    if day is not None:
                        self.recompute_ranks(day)
        logger.info(f"[remove-session] session={session_id} day={day} removed={removed}")
        self.notifier.publish(LEADERBOARD_TOPIC)
        return removed


def _row(entry, nickname, rank, with_day=False, start_time=None) -> StandingRow:
    return StandingRow(
        nickname=nickname,
        score=entry.score,
        duration_ms=entry.duration_ms,
        rank=rank if rank is not None else 0,
        session_id=entry.session_id,
        day=entry.day if with_day else None,
        start_time=start_time,
    )
