"""create quiz_session and team tables

Revision ID: 3a7c1d9e2b40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c1d9e2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'quiz_session' not in existing_tables:
        op.create_table(
            'quiz_session',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('session_id', sa.String(length=36), nullable=False),
            sa.Column('session_code', sa.String(length=7), nullable=False),
            sa.Column('session_name', sa.String(length=120), nullable=False),
            sa.Column('words_json', sa.Text(), nullable=False),
            sa.Column('start_time', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('quiz_session') as batch_op:
            batch_op.create_index('ix_quiz_session_session_id', ['session_id'], unique=True)
            batch_op.create_index('ix_quiz_session_session_code', ['session_code'], unique=True)
            batch_op.create_index('ix_quiz_session_created_at', ['created_at'], unique=False)

    if 'team' not in existing_tables:
        op.create_table(
            'team',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('team_id', sa.String(length=36), nullable=False),
            sa.Column('team_token', sa.String(length=64), nullable=False),
            sa.Column('session_code', sa.String(length=7), nullable=False),
            sa.Column('animal_id', sa.Integer(), nullable=False),
            sa.Column('team_name', sa.String(length=120), nullable=False),
            sa.Column('team_color', sa.String(length=16), nullable=False),
            sa.Column('word1', sa.String(length=120), nullable=False),
            sa.Column('word2', sa.String(length=120), nullable=False),
            sa.Column('progress', sa.Integer(), nullable=False),
            sa.Column('hints_used', sa.Integer(), nullable=False),
            sa.Column('time_penalty_seconds', sa.Integer(), nullable=False),
            sa.Column('finished', sa.Boolean(), nullable=False),
            sa.Column('last_seen', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('session_code', 'animal_id', name='uq_team_session_animal'),
        )
        with op.batch_alter_table('team') as batch_op:
            batch_op.create_index('ix_team_team_id', ['team_id'], unique=True)
            batch_op.create_index('ix_team_session_code', ['session_code'], unique=False)


def downgrade():
    with op.batch_alter_table('team') as batch_op:
        batch_op.drop_index('ix_team_session_code')
        batch_op.drop_index('ix_team_team_id')
    op.drop_table('team')
    with op.batch_alter_table('quiz_session') as batch_op:
        batch_op.drop_index('ix_quiz_session_created_at')
        batch_op.drop_index('ix_quiz_session_session_code')
        batch_op.drop_index('ix_quiz_session_session_id')
    op.drop_table('quiz_session')
