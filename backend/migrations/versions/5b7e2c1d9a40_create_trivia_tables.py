"""create player, question, game_session, session_answer, leaderboard_daily

Revision ID: 5b7e2c1d9a40
Revises:
Create Date: 2025-10-02 10:12:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7e2c1d9a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'player',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('nickname', sa.String(length=30), nullable=False),
        sa.Column('device_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.BigInteger(), nullable=False, server_default='0'),
    )
    op.create_index('ix_player_device_id', 'player', ['device_id'])

    op.create_table(
        'question',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('label', sa.String(length=3), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=False),
        sa.Column('image_url', sa.String(length=512), nullable=True),
        sa.Column('tags', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("label IN ('CAN', 'USA')", name='ck_question_label'),
    )
    op.create_index('ix_question_label', 'question', ['label'])

    op.create_table(
        'game_session',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('player_id', sa.String(length=36), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('device_id', sa.String(length=36), nullable=False),
        sa.Column('start_time', sa.BigInteger(), nullable=False),
        sa.Column('end_time', sa.BigInteger(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('duration_ms', sa.BigInteger(), nullable=True),
        sa.Column('question_count', sa.Integer(), nullable=False, server_default='20'),
    )
    op.create_index('ix_game_session_device_id', 'game_session', ['device_id'])

    op.create_table(
        'session_answer',
        sa.Column('session_id', sa.String(length=36), sa.ForeignKey('game_session.id'), primary_key=True),
        sa.Column('question_id', sa.String(length=32), sa.ForeignKey('question.id'), primary_key=True),
        sa.Column('correct', sa.Boolean(), nullable=False),
        sa.Column('latency_ms', sa.Integer(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.UniqueConstraint('session_id', 'order_index', name='uq_session_answer_order'),
    )

    op.create_table(
        'leaderboard_daily',
        sa.Column('day', sa.String(length=10), primary_key=True),
        sa.Column('session_id', sa.String(length=36), sa.ForeignKey('game_session.id'), primary_key=True),
        sa.Column('player_id', sa.String(length=36), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('duration_ms', sa.BigInteger(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=True),
    )
    op.create_index(
        'ix_leaderboard_daily_standing',
        'leaderboard_daily',
        ['day', sa.text('score DESC'), 'duration_ms'],
    )


def downgrade():
    op.drop_index('ix_leaderboard_daily_standing', table_name='leaderboard_daily')
    op.drop_table('leaderboard_daily')
    op.drop_table('session_answer')
    op.drop_index('ix_game_session_device_id', table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_question_label', table_name='question')
    op.drop_table('question')
    op.drop_index('ix_player_device_id', table_name='player')
    op.drop_table('player')
