from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _admin_check(flask_app):
    """Build the shared-secret check from config, or None when admin is disabled."""
    pw_hash = flask_app.config.get('ADMIN_PASSWORD_HASH')
    if not pw_hash:
        password = flask_app.config.get('ADMIN_PASSWORD')
        if not password:
            return None
        pw_hash = bcrypt.generate_password_hash(password)

    def check(code):
        return bcrypt.check_password_hash(pw_hash, code)

    return check


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # Wire the game engine against the SQL store and the socket notifier
    from truenorth.services.trivia import Engine
    from truenorth.services.trivia.notifier import SocketIONotifier
    from truenorth.services.trivia.sql_store import SqlTriviaStore
    flask_app.extensions['truenorth'] = Engine(
        SqlTriviaStore(db),
        SocketIONotifier(socketio),
        tz=flask_app.config.get('LEADERBOARD_TZ', 'UTC'),
        share_text=flask_app.config.get('SHARE_TEXT'),
        admin_check=_admin_check(flask_app),
    )

    from truenorth.main import main
    flask_app.register_blueprint(main)

    from truenorth.api import register_error_handlers
    from truenorth.api.players import players
    from truenorth.api.session import sessions
    from truenorth.api.leaderboard import leaderboard
    from truenorth.api.admin import admin
    flask_app.register_blueprint(players, url_prefix='/api/player')
    flask_app.register_blueprint(sessions, url_prefix='/api/session')
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')
    flask_app.register_blueprint(admin, url_prefix='/api/admin')
    register_error_handlers(flask_app)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from truenorth.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from truenorth.seed import seed_questions
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            added = seed_questions(flask_app.extensions['truenorth'].store)
            print(f'Database has been reset and seeded with {added} questions!')

    @click.command('seed-questions')
    def seed_questions_command():
        """Adds the bundled questions that are not in the bank yet."""
        from truenorth.seed import seed_questions
        with flask_app.app_context():
            added = seed_questions(flask_app.extensions['truenorth'].store)
            print(f'Seeded {added} questions')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_questions_command)

    return flask_app
