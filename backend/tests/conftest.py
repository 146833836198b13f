import os
import sys
import random
import pytest

# Ensure the backend root (containing the `truenorth` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from truenorth import create_app, db, socketio
from truenorth.services.trivia import Engine
from truenorth.services.trivia.notifier import RecordingNotifier
from truenorth.services.trivia.records import Player, Question
from truenorth.services.trivia.store import MemoryStore

ADMIN_CODE = 'letmein'
# 2025-10-09T08:53:20Z
T0 = 1_760_000_000_000


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    ADMIN_PASSWORD = ADMIN_CODE
    LEADERBOARD_TZ = 'UTC'
    LEADERBOARD_LIMIT = 50
    ADMIN_LEADERBOARD_LIMIT = 200
    SHARE_TEXT = 'I scored {score} points on True North or Not! Can you beat my score?'
    CORS_ORIGINS = ['http://localhost:5173']


class FakeClock:
    def __init__(self, start=T0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def make_bank(store, can=12, usa=12):
    """Add ``can`` CAN-labelled and ``usa`` USA-labelled active questions."""
    with store.transaction():
        for label, count in (('CAN', can), ('USA', usa)):
            for i in range(count):
                store.add_question(Question(
                    id=f'{label.lower()}{i}',
                    prompt=f'{label} prompt {i}',
                    label=label,
                    explanation=f'{label} explanation {i}',
                    tags=frozenset({'test'}),
                ))


def add_player(store, player_id, nickname='Alice', device_id=None):
    with store.transaction():
        store.add_player(Player(id=player_id, nickname=nickname, device_id=device_id, created_at=T0))
    return player_id


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def store():
    s = MemoryStore()
    make_bank(s)
    return s


@pytest.fixture()
def engine(store, notifier, clock):
    return Engine(
        store,
        notifier,
        clock=clock,
        rng=random.Random(7),
        share_text=TestConfig.SHARE_TEXT,
        admin_check=lambda code: code == ADMIN_CODE,
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import truenorth.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def file_app(tmp_path):
    """App on a SQLite file so threads with their own app context share data."""
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'truenorth.db'}"

    application = create_app(FileConfig)
    with application.app_context():
        import truenorth.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def sql_store(flask_app):
    return flask_app.extensions['truenorth'].store


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
