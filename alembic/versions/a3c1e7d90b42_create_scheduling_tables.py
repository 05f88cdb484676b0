"""create_scheduling_tables

Revision ID: a3c1e7d90b42
Revises:
Create Date: 2026-10-19 09:12:44.310271

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a3c1e7d90b42'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create catalog, enrollment, preference and scheduled workout tables."""
    op.create_table(
        'programs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('duration_weeks', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_programs'),
    )
    op.create_index('ix_programs_id', 'programs', ['id'])

    op.create_table(
        'program_workouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('program_id', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('focus', sa.String(length=100), nullable=True),
        sa.Column('estimated_duration', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id'], ondelete='CASCADE', name='fk_program_workouts_program_id'),
        sa.PrimaryKeyConstraint('id', name='pk_program_workouts'),
    )
    op.create_index('ix_program_workouts_id', 'program_workouts', ['id'])
    op.create_index(
        'ix_program_workouts_program_order', 'program_workouts', ['program_id', 'week_number', 'day_number']
    )

    op.create_table(
        'program_enrollments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('program_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id'], ondelete='CASCADE', name='fk_program_enrollments_program_id'),
        sa.PrimaryKeyConstraint('id', name='pk_program_enrollments'),
        sa.UniqueConstraint('program_id', 'user_id', name='uq_program_enrollment_user'),
    )
    op.create_index('ix_program_enrollments_id', 'program_enrollments', ['id'])
    op.create_index('ix_program_enrollments_user_id', 'program_enrollments', ['user_id'])

    op.create_table(
        'schedule_preferences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('enrollment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('preferred_days', sa.JSON(), nullable=False),
        sa.Column('preferred_time_slot', sa.String(length=20), nullable=True),
        sa.Column('reminder_time', sa.String(length=5), nullable=True),
        sa.Column('auto_reschedule_enabled', sa.Boolean(), nullable=False),
        sa.Column('reschedule_window_weeks', sa.Integer(), nullable=False),
        sa.Column('min_rest_days', sa.Integer(), nullable=False),
        sa.Column('max_consecutive_workout_days', sa.Integer(), nullable=False),
        sa.Column('paused_until', sa.Date(), nullable=True),
        sa.Column('pause_reason', sa.Text(), nullable=True),
        sa.Column('last_schedule_generated_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ['enrollment_id'], ['program_enrollments.id'], ondelete='CASCADE',
            name='fk_schedule_preferences_enrollment_id',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_schedule_preferences'),
        sa.UniqueConstraint('enrollment_id', name='uq_schedule_preferences_enrollment_id'),
    )
    op.create_index('ix_schedule_preferences_id', 'schedule_preferences', ['id'])
    op.create_index('ix_schedule_preferences_user_id', 'schedule_preferences', ['user_id'])

    op.create_table(
        'scheduled_workouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('schedule_id', sa.Integer(), nullable=False),
        sa.Column('program_workout_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('scheduled_time', sa.String(length=5), nullable=True),
        sa.Column('original_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=11), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('skipped_at', sa.DateTime(), nullable=True),
        sa.Column('skipped_reason', sa.Text(), nullable=True),
        sa.Column('rescheduled_count', sa.Integer(), nullable=False),
        sa.Column('rescheduled_from', sa.Date(), nullable=True),
        sa.Column('rescheduled_reason', sa.Text(), nullable=True),
        sa.Column('completed_workout_session_ref', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ['schedule_id'], ['schedule_preferences.id'], ondelete='CASCADE',
            name='fk_scheduled_workouts_schedule_id',
        ),
        sa.ForeignKeyConstraint(
            ['program_workout_id'], ['program_workouts.id'], ondelete='CASCADE',
            name='fk_scheduled_workouts_program_workout_id',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_scheduled_workouts'),
        sa.UniqueConstraint('schedule_id', 'scheduled_date', name='uq_scheduled_workout_schedule_date'),
        sa.UniqueConstraint('schedule_id', 'program_workout_id', name='uq_scheduled_workout_schedule_program_workout'),
    )
    op.create_index('ix_scheduled_workouts_id', 'scheduled_workouts', ['id'])
    op.create_index('ix_scheduled_workouts_schedule_id', 'scheduled_workouts', ['schedule_id'])
    op.create_index('ix_scheduled_workouts_user_id', 'scheduled_workouts', ['user_id'])
    op.create_index('ix_scheduled_workouts_status', 'scheduled_workouts', ['status'])
    op.create_index('ix_scheduled_workouts_user_date', 'scheduled_workouts', ['user_id', 'scheduled_date'])


def downgrade() -> None:
    """Drop scheduling tables."""
    op.drop_index('ix_scheduled_workouts_user_date', table_name='scheduled_workouts')
    op.drop_index('ix_scheduled_workouts_status', table_name='scheduled_workouts')
    op.drop_index('ix_scheduled_workouts_user_id', table_name='scheduled_workouts')
    op.drop_index('ix_scheduled_workouts_schedule_id', table_name='scheduled_workouts')
    op.drop_index('ix_scheduled_workouts_id', table_name='scheduled_workouts')
    op.drop_table('scheduled_workouts')

    op.drop_index('ix_schedule_preferences_user_id', table_name='schedule_preferences')
    op.drop_index('ix_schedule_preferences_id', table_name='schedule_preferences')
    op.drop_table('schedule_preferences')

    op.drop_index('ix_program_enrollments_user_id', table_name='program_enrollments')
    op.drop_index('ix_program_enrollments_id', table_name='program_enrollments')
    op.drop_table('program_enrollments')

    op.drop_index('ix_program_workouts_program_order', table_name='program_workouts')
    op.drop_index('ix_program_workouts_id', table_name='program_workouts')
    op.drop_table('program_workouts')

    op.drop_index('ix_programs_id', table_name='programs')
    op.drop_table('programs')
