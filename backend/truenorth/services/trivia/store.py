"""Store contract for the trivia core and an in-memory implementation.

Services never reach for a global database handle; they receive a store
and call the methods below. ``SqlTriviaStore`` backs the running app,
``MemoryStore`` backs unit tests and local scripts.
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, List, Optional, Tuple

from .errors import DuplicateAnswer
from .records import Answer, LeaderboardEntry, Player, Question, Session, rank_key


class TriviaStore:
    """Persistence operations used by the core.

    Mutating methods do not commit on their own: callers group them in
    ``transaction()``, which commits on success and rolls back on any
    exception.
    """

    @contextmanager
    def transaction(self) -> Iterator[None]:
        raise NotImplementedError

    # players
    def get_player(self, player_id: str) -> Optional[Player]:
        raise NotImplementedError

    def find_player_by_device(self, device_id: str) -> Optional[Player]:
        raise NotImplementedError

    def add_player(self, player: Player) -> None:
        raise NotImplementedError

    def rename_player(self, player_id: str, nickname: str) -> None:
        raise NotImplementedError

    # questions
    def get_question(self, question_id: str) -> Optional[Question]:
        raise NotImplementedError

    def active_questions(self, label: str) -> List[Question]:
        raise NotImplementedError

    def list_questions(self) -> List[Question]:
        raise NotImplementedError

    def add_question(self, question: Question) -> None:
        raise NotImplementedError

    def set_question_active(self, question_id: str, active: bool) -> Optional[Question]:
        raise NotImplementedError

    # sessions
    def get_session(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def get_open_session(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def open_session_for_device(self, device_id: str) -> Optional[Session]:
        raise NotImplementedError

    def create_session(self, session: Session) -> None:
        raise NotImplementedError

    def close_session(self, session_id: str, end_time: int, duration_ms: int) -> None:
        raise NotImplementedError

    def delete_session(self, session_id: str) -> bool:
        """Remove a session with its answers and leaderboard entry."""
        raise NotImplementedError

    # answers
    def answers_for_session(self, session_id: str) -> List[Answer]:
        """Answers ordered by order_index, most recent first."""
        raise NotImplementedError

    def count_answers(self, session_id: str) -> int:
        raise NotImplementedError

    def has_answer(self, session_id: str, question_id: str) -> bool:
        raise NotImplementedError

    def insert_answer(self, answer: Answer) -> None:
        """Write an answer; raises DuplicateAnswer if the pair exists."""
        raise NotImplementedError

    def increment_score(self, session_id: str, points: int) -> int:
        """Atomically add points and return the new score."""
        raise NotImplementedError

    # leaderboard
    def insert_entry(self, entry: LeaderboardEntry) -> None:
        raise NotImplementedError

    def entry_for_session(self, session_id: str) -> Optional[LeaderboardEntry]:
        raise NotImplementedError

    def entries_for_day(self, day: str) -> List[LeaderboardEntry]:
        """Entries of one bucket in standings order."""
        raise NotImplementedError

    def set_ranks(self, day: str, ranks: List[Tuple[str, int]]) -> None:
        raise NotImplementedError

    def count_ahead(self, day: str, score: int, duration_ms: int,
                    finished_at: int, session_id: str) -> int:
        raise NotImplementedError

    def ranked_entries(self, day: Optional[str], limit: int) -> List[Tuple[LeaderboardEntry, str]]:
        """(entry, nickname) pairs in standings order; ``day=None`` spans all days."""
        raise NotImplementedError

    def recent_entries(self, limit: int) -> List[Tuple[LeaderboardEntry, str, Optional[int]]]:
        """(entry, nickname, session start time), newest day first, standings order within a day."""
        raise NotImplementedError

    def delete_entries(self, day: Optional[str] = None) -> int:
        raise NotImplementedError


class MemoryStore(TriviaStore):
    """Dict-backed store. One re-entrant lock serializes every call and
    transactions snapshot state so a failure restores it."""

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self.players = {}
        self.questions = {}
        self.sessions = {}
        self.answers = {}
        self.entries = {}

    def _state(self):
        return (dict(self.players), dict(self.questions), dict(self.sessions),
                dict(self.answers), dict(self.entries))

    @contextmanager
    def transaction(self):
        with self._lock:
            snapshot = self._state() if self._depth == 0 else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    (self.players, self.questions, self.sessions,
                     self.answers, self.entries) = snapshot
                raise
            finally:
                self._depth -= 1

    def get_player(self, player_id):
        with self._lock:
            return self.players.get(player_id)

    def find_player_by_device(self, device_id):
        with self._lock:
            matches = [p for p in self.players.values() if p.device_id == device_id]
        return max(matches, key=lambda p: p.created_at) if matches else None

    def add_player(self, player):
        with self._lock:
            self.players[player.id] = player

    def rename_player(self, player_id, nickname):
        with self._lock:
            player = self.players.get(player_id)
            if player:
                self.players[player_id] = replace(player, nickname=nickname)

    def get_question(self, question_id):
        with self._lock:
            return self.questions.get(question_id)

    def active_questions(self, label):
        with self._lock:
            return [q for q in self.questions.values() if q.active and q.label == label]

    def list_questions(self):
        with self._lock:
            return sorted(self.questions.values(), key=lambda q: q.prompt)

    def add_question(self, question):
        with self._lock:
            self.questions[question.id] = question

    def set_question_active(self, question_id, active):
        with self._lock:
            question = self.questions.get(question_id)
            if question is None:
                return None
            question = self.questions[question_id] = replace(question, active=active)
            return question

    def get_session(self, session_id):
        with self._lock:
            return self.sessions.get(session_id)

    def get_open_session(self, session_id):
        session = self.get_session(session_id)
        return session if session and session.is_open else None

    def open_session_for_device(self, device_id):
        with self._lock:
            open_sessions = [s for s in self.sessions.values()
                             if s.device_id == device_id and s.is_open]
        return max(open_sessions, key=lambda s: s.start_time) if open_sessions else None

    def create_session(self, session):
        with self._lock:
            self.sessions[session.id] = session

    def close_session(self, session_id, end_time, duration_ms):
        with self._lock:
            session = self.sessions[session_id]
            self.sessions[session_id] = replace(session, end_time=end_time, duration_ms=duration_ms)

    def delete_session(self, session_id):
        with self._lock:
            for key in [k for k in self.answers if k[0] == session_id]:
                del self.answers[key]
            for key in [k for k in self.entries if k[1] == session_id]:
                del self.entries[key]
            return self.sessions.pop(session_id, None) is not None

    def answers_for_session(self, session_id):
        with self._lock:
            answers = [a for a in self.answers.values() if a.session_id == session_id]
        return sorted(answers, key=lambda a: a.order_index, reverse=True)

    def count_answers(self, session_id):
        with self._lock:
            return sum(1 for k in self.answers if k[0] == session_id)

    def has_answer(self, session_id, question_id):
        with self._lock:
            return (session_id, question_id) in self.answers

    def insert_answer(self, answer):
        with self._lock:
            key = (answer.session_id, answer.question_id)
            if key in self.answers:
                raise DuplicateAnswer(answer.session_id, answer.question_id)
            self.answers[key] = answer

    def increment_score(self, session_id, points):
        with self._lock:
            session = self.sessions[session_id]
            session = self.sessions[session_id] = replace(session, score=session.score + points)
            return session.score

    def insert_entry(self, entry):
        with self._lock:
            if any(k[1] == entry.session_id for k in self.entries):
                raise ValueError(f"session {entry.session_id} already has a leaderboard entry")
            self.entries[(entry.day, entry.session_id)] = entry

    def entry_for_session(self, session_id):
        with self._lock:
            for (_, sid), entry in self.entries.items():
                if sid == session_id:
                    return entry
        return None

    def entries_for_day(self, day):
        with self._lock:
            entries = [e for e in self.entries.values() if e.day == day]
        return sorted(entries, key=LeaderboardEntry.sort_key)

    def set_ranks(self, day, ranks):
        with self._lock:
            for session_id, rank in ranks:
                key = (day, session_id)
                self.entries[key] = replace(self.entries[key], rank=rank)

    def count_ahead(self, day, score, duration_ms, finished_at, session_id):
        mine = rank_key(score, duration_ms, finished_at, session_id)
        return sum(1 for e in self.entries_for_day(day) if e.sort_key() < mine)

    def _nickname(self, player_id):
        player = self.players.get(player_id)
        return player.nickname if player else ''

    def _start_time(self, session_id):
        session = self.sessions.get(session_id)
        return session.start_time if session else None

    def ranked_entries(self, day, limit):
        with self._lock:
            entries = [e for e in self.entries.values() if day is None or e.day == day]
            entries.sort(key=LeaderboardEntry.sort_key)
            return [(e, self._nickname(e.player_id)) for e in entries[:limit]]

    def recent_entries(self, limit):
        with self._lock:
            entries = sorted(self.entries.values(), key=LeaderboardEntry.sort_key)
            # stable sort: day desc keeps standings order inside each day
            entries.sort(key=lambda e: e.day, reverse=True)
            return [
                (e, self._nickname(e.player_id), self._start_time(e.session_id))
                for e in entries[:limit]
            ]

    def delete_entries(self, day=None):
        with self._lock:
            doomed = [k for k in self.entries if day is None or k[0] == day]
            for key in doomed:
                del self.entries[key]
            return len(doomed)
