"""add finished_at tie-break and one-entry-per-session constraint to leaderboard_daily

Revision ID: 9c4f1e6b2d87
Revises: 5b7e2c1d9a40
Create Date: 2025-10-09 16:40:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9c4f1e6b2d87'
down_revision = '5b7e2c1d9a40'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    cols = {c['name'] for c in insp.get_columns('leaderboard_daily')}
    if 'finished_at' not in cols:
        op.add_column('leaderboard_daily', sa.Column('finished_at', sa.BigInteger(), nullable=True))
        # Backfill from the owning session's end time
        op.execute(
            "UPDATE leaderboard_daily SET finished_at = "
            "(SELECT end_time FROM game_session WHERE game_session.id = leaderboard_daily.session_id)"
        )
        op.execute("UPDATE leaderboard_daily SET finished_at = 0 WHERE finished_at IS NULL")
        with op.batch_alter_table('leaderboard_daily') as batch:
            batch.alter_column('finished_at', existing_type=sa.BigInteger(), nullable=False)

    uniques = {u['name'] for u in insp.get_unique_constraints('leaderboard_daily')}
    if 'uq_leaderboard_session' not in uniques:
        with op.batch_alter_table('leaderboard_daily') as batch:
            batch.create_unique_constraint('uq_leaderboard_session', ['session_id'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    uniques = {u['name'] for u in insp.get_unique_constraints('leaderboard_daily')}
    cols = {c['name'] for c in insp.get_columns('leaderboard_daily')}
    with op.batch_alter_table('leaderboard_daily') as batch:
        if 'uq_leaderboard_session' in uniques:
            batch.drop_constraint('uq_leaderboard_session', type_='unique')
        if 'finished_at' in cols:
            batch.drop_column('finished_at')
