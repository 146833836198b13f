from truenorth import db
from truenorth.services.trivia import records


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.String(36), primary_key=True)
    nickname = db.Column(db.String(30), nullable=False)
    device_id = db.Column(db.String(36), nullable=True, index=True)
    created_at = db.Column(db.BigInteger, nullable=False, default=0)

    def to_record(self):
        return records.Player(
            id=self.id,
            nickname=self.nickname,
            device_id=self.device_id,
            created_at=self.created_at or 0,
        )


class Question(db.Model):
    __tablename__ = 'question'
    __table_args__ = (
        db.CheckConstraint("label IN ('CAN', 'USA')", name='ck_question_label'),
    )
    id = db.Column(db.String(32), primary_key=True)
    prompt = db.Column(db.Text, nullable=False)
    label = db.Column(db.String(3), nullable=False, index=True)
    explanation = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(512), nullable=True)
    tags = db.Column(db.Text, nullable=True)  # comma separated
    active = db.Column(db.Boolean, nullable=False, default=True)

    def to_record(self):
        return records.Question(
            id=self.id,
            prompt=self.prompt,
            label=self.label,
            explanation=self.explanation,
            image_url=self.image_url,
            tags=frozenset(t.strip() for t in (self.tags or '').split(',') if t.strip()),
            active=bool(self.active),
        )


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.String(36), primary_key=True)
    player_id = db.Column(db.String(36), db.ForeignKey('player.id'), nullable=False)
    device_id = db.Column(db.String(36), nullable=False, index=True)
    start_time = db.Column(db.BigInteger, nullable=False)
    end_time = db.Column(db.BigInteger, nullable=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    duration_ms = db.Column(db.BigInteger, nullable=True)
    question_count = db.Column(db.Integer, nullable=False, default=records.DECK_SIZE)

    def to_record(self):
        return records.Session(
            id=self.id,
            player_id=self.player_id,
            device_id=self.device_id,
            start_time=self.start_time,
            end_time=self.end_time,
            score=self.score or 0,
            duration_ms=self.duration_ms,
            question_count=self.question_count or records.DECK_SIZE,
        )


class SessionAnswer(db.Model):
    __tablename__ = 'session_answer'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'order_index', name='uq_session_answer_order'),
    )
    session_id = db.Column(db.String(36), db.ForeignKey('game_session.id'), primary_key=True)
    question_id = db.Column(db.String(32), db.ForeignKey('question.id'), primary_key=True)
    correct = db.Column(db.Boolean, nullable=False)
    latency_ms = db.Column(db.Integer, nullable=False)
    order_index = db.Column(db.Integer, nullable=False)

    def to_record(self):
        return records.Answer(
            session_id=self.session_id,
            question_id=self.question_id,
            correct=bool(self.correct),
            latency_ms=self.latency_ms,
            order_index=self.order_index,
        )


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_daily'
    __table_args__ = (
        db.UniqueConstraint('session_id', name='uq_leaderboard_session'),
    )
    day = db.Column(db.String(10), primary_key=True)
    session_id = db.Column(db.String(36), db.ForeignKey('game_session.id'), primary_key=True)
    player_id = db.Column(db.String(36), db.ForeignKey('player.id'), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    duration_ms = db.Column(db.BigInteger, nullable=False)
    finished_at = db.Column(db.BigInteger, nullable=False)
    rank = db.Column(db.Integer, nullable=True)

    @classmethod
    def standing_order(cls):
        return (cls.score.desc(), cls.duration_ms.asc(), cls.finished_at.asc(), cls.session_id.asc())

    def to_record(self):
        return records.LeaderboardEntry(
            day=self.day,
            session_id=self.session_id,
            player_id=self.player_id,
            score=self.score,
            duration_ms=self.duration_ms,
            finished_at=self.finished_at,
            rank=self.rank,
        )


db.Index(
    'ix_leaderboard_daily_standing',
    LeaderboardEntry.day,
    LeaderboardEntry.score.desc(),
    LeaderboardEntry.duration_ms,
)
