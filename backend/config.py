import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///truenorth.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Shared admin secret. ADMIN_PASSWORD_HASH (bcrypt) wins when both are set.
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'truenorth2024')
    ADMIN_PASSWORD_HASH = os.environ.get('ADMIN_PASSWORD_HASH')
    # Day buckets for the daily leaderboard are computed in this timezone
    LEADERBOARD_TZ = os.environ.get('LEADERBOARD_TZ', 'UTC')
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '50'))
    ADMIN_LEADERBOARD_LIMIT = int(os.environ.get('ADMIN_LEADERBOARD_LIMIT', '200'))
    SHARE_TEXT = os.environ.get(
        'SHARE_TEXT',
        'I scored {score} points on True North or Not! \U0001F341\U0001F985 Can you beat my score?',
    )
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
        ).split(',') if o.strip()
    ]
