"""Initial migration - create quizzes and quiz_attempts

Revision ID: 0_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Create enums ──────────────────────────────────────────────────
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE attempt_mode_enum AS ENUM ('PRACTICE', 'TEST');
        EXCEPTION WHEN duplicate_object THEN null;
        END $$;
    """)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE attempt_status_enum AS ENUM ('IN_PROGRESS', 'COMPLETED', 'ABANDONED');
        EXCEPTION WHEN duplicate_object THEN null;
        END $$;
    """)

    # ── quizzes table ─────────────────────────────────────────────────
    op.create_table(
        'quizzes',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('language', sa.String(20), nullable=False, server_default='id'),
        sa.Column('difficulty', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('version', sa.String(20), nullable=False, server_default='1.0.0'),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('recommended_time_min', sa.Integer(), nullable=False),
        sa.Column('correct_points', sa.Float(), nullable=False),
        sa.Column('wrong_points', sa.Float(), nullable=False, server_default='0'),
        sa.Column('max_score', sa.Float(), nullable=False),
        sa.Column('sections_json', sa.JSON(), nullable=False),
        sa.Column('questions_json', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_quizzes_user_id', 'quizzes', ['user_id'])

    # ── quiz_attempts table ───────────────────────────────────────────
    op.create_table(
        'quiz_attempts',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('quiz_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('mode', postgresql.ENUM('PRACTICE', 'TEST', name='attempt_mode_enum', create_type=False), nullable=False),
        sa.Column('status', postgresql.ENUM('IN_PROGRESS', 'COMPLETED', 'ABANDONED', name='attempt_status_enum', create_type=False), nullable=False, server_default='IN_PROGRESS'),
        sa.Column('is_randomized', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('randomized_order_json', sa.JSON(), nullable=True),
        sa.Column('answers_json', sa.JSON(), nullable=False),
        sa.Column('results_json', sa.JSON(), nullable=True),
        sa.Column('current_question_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('max_score', sa.Float(), nullable=False),
        sa.Column('percentage', sa.Float(), nullable=True),
        sa.Column('time_spent_seconds', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_saved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_quiz_attempts_user_quiz_status',
        'quiz_attempts',
        ['user_id', 'quiz_id', 'status'],
    )


def downgrade() -> None:
    op.drop_index('ix_quiz_attempts_user_quiz_status', table_name='quiz_attempts')
    op.drop_table('quiz_attempts')
    op.drop_index('ix_quizzes_user_id', table_name='quizzes')
    op.drop_table('quizzes')

    # ── Drop enums ────────────────────────────────────────────────────
    sa.Enum(name='attempt_status_enum').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='attempt_mode_enum').drop(op.get_bind(), checkfirst=True)
