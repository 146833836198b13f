"""Typed records passed between the services and the store."""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

LABELS = ('CAN', 'USA')
DECK_SIZE = 20
PER_LABEL = DECK_SIZE // len(LABELS)
MAX_LATENCY_MS = 60000


@dataclass(frozen=True)
class Player:
    id: str
    nickname: str
    device_id: Optional[str] = None
    created_at: int = 0


@dataclass(frozen=True)
class Question:
    id: str
    prompt: str
    label: str
    explanation: str
    image_url: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    active: bool = True


@dataclass(frozen=True)
class Session:
    id: str
    player_id: str
    device_id: str
    start_time: int
    end_time: Optional[int] = None
    score: int = 0
    duration_ms: Optional[int] = None
    question_count: int = DECK_SIZE

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class Answer:
    session_id: str
    question_id: str
    correct: bool
    latency_ms: int
    order_index: int


@dataclass(frozen=True)
class LeaderboardEntry:
    day: str
    session_id: str
    player_id: str
    score: int
    duration_ms: int
    finished_at: int
    rank: Optional[int] = None

    def sort_key(self):
        return rank_key(self.score, self.duration_ms, self.finished_at, self.session_id)


def rank_key(score, duration_ms, finished_at, session_id):
    """Total order for standings: score desc, duration asc, then finish time and id."""
    return (-score, duration_ms, finished_at, session_id)


@dataclass(frozen=True)
class StandingRow:
    nickname: str
    score: int
    duration_ms: int
    rank: int
    session_id: str
    day: Optional[str] = None
    start_time: Optional[int] = None

    def to_dict(self):
        data = {
            'nickname': self.nickname,
            'score': self.score,
            'durationMs': self.duration_ms,
            'rank': self.rank,
            'sessionId': self.session_id,
        }
        if self.day is not None:
            data['date'] = self.day
            data['startTime'] = self.start_time
        return data


@dataclass(frozen=True)
class DeckCard:
    """What the client sees of a question before answering it."""
    id: str
    prompt: str
    image_url: Optional[str]
    order_index: int

    def to_dict(self):
        return {
            'id': self.id,
            'prompt': self.prompt,
            'imageUrl': self.image_url,
            'orderIndex': self.order_index,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    base: int = 0
    time_bonus: int = 0
    streak_bonus: int = 0

    @property
    def total(self) -> int:
        return self.base + self.time_bonus + self.streak_bonus


@dataclass(frozen=True)
class StartResult:
    session_id: str
    deck: List[DeckCard] = field(default_factory=list)
    resumed: bool = False

    def to_dict(self):
        return {
            'sessionId': self.session_id,
            'deck': [card.to_dict() for card in self.deck],
        }


@dataclass(frozen=True)
class AnswerResult:
    correct: bool
    true_label: str
    explanation: str
    points_awarded: int
    streak: int
    running_score: int
    breakdown: ScoreBreakdown = ScoreBreakdown()

    def to_dict(self):
        return {
            'correct': self.correct,
            'trueLabel': self.true_label,
            'explanation': self.explanation,
            'pointsAwarded': self.points_awarded,
            'streak': self.streak,
            'runningScore': self.running_score,
        }


@dataclass(frozen=True)
class FinishResult:
    score: int
    duration_ms: int
    rank: int
    share_text: str
    day: str

    def to_dict(self):
        return {
            'score': self.score,
            'durationMs': self.duration_ms,
            'rank': self.rank,
            'shareText': self.share_text,
        }
