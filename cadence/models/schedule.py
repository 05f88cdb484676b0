"""Schedule preference and scheduled workout ledger models."""
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cadence.db.database import Base
from cadence.models.enums import ScheduledWorkoutStatus


class SchedulePreference(Base):
    """Per-enrollment scheduling preferences.

    ``preferred_days`` holds weekday integers with 0=Sunday ... 6=Saturday.
    """
    __tablename__ = "schedule_preferences"

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        Integer,
        ForeignKey("program_enrollments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    user_id = Column(Integer, nullable=False, index=True)

    preferred_days = Column(JSON, nullable=False, default=lambda: [1, 3, 5])
    preferred_time_slot = Column(String(20), nullable=True)
    reminder_time = Column(String(5), nullable=True)  # HH:MM

    auto_reschedule_enabled = Column(Boolean, default=True, nullable=False)
    reschedule_window_weeks = Column(Integer, default=2, nullable=False)

    min_rest_days = Column(Integer, default=1, nullable=False)
    max_consecutive_workout_days = Column(Integer, default=3, nullable=False)

    paused_until = Column(Date, nullable=True)
    pause_reason = Column(Text, nullable=True)

    last_schedule_generated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    enrollment = relationship("ProgramEnrollment", back_populates="schedule")
    workouts = relationship(
        "ScheduledWorkout",
        back_populates="schedule",
        cascade="all, delete-orphan",
    )

    def is_paused(self, today) -> bool:
        """A schedule is paused while ``paused_until`` lies after ``today``."""
        return self.paused_until is not None and self.paused_until > today

    def __repr__(self):
        return f"<SchedulePreference(id={self.id}, enrollment_id={self.enrollment_id}, days={self.preferred_days})>"


class ScheduledWorkout(Base):
    """Calendar-dated instance of one program workout for one user."""
    __tablename__ = "scheduled_workouts"

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(
        Integer,
        ForeignKey("schedule_preferences.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    program_workout_id = Column(
        Integer,
        ForeignKey("program_workouts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(Integer, nullable=False, index=True)

    # Scheduling (calendar dates, never timestamps)
    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(String(5), nullable=True)
    original_date = Column(Date, nullable=True)

    # Status tracking
    status = Column(
        Enum(ScheduledWorkoutStatus, name="scheduled_workout_status", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        default=ScheduledWorkoutStatus.SCHEDULED,
        nullable=False,
        index=True,
    )
    completed_at = Column(DateTime, nullable=True)
    skipped_at = Column(DateTime, nullable=True)
    skipped_reason = Column(Text, nullable=True)

    # Rescheduling info
    rescheduled_count = Column(Integer, default=0, nullable=False)
    rescheduled_from = Column(Date, nullable=True)
    rescheduled_reason = Column(Text, nullable=True)

    # Opaque reference into the workout session log
    completed_workout_session_ref = Column(String(100), nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    schedule = relationship("SchedulePreference", back_populates="workouts")
    program_workout = relationship("ProgramWorkout", lazy="joined")

    __table_args__ = (
        UniqueConstraint("schedule_id", "scheduled_date", name="uq_scheduled_workout_schedule_date"),
        UniqueConstraint("schedule_id", "program_workout_id", name="uq_scheduled_workout_schedule_program_workout"),
        Index("ix_scheduled_workouts_user_date", "user_id", "scheduled_date"),
    )

    def __repr__(self):
        return (
            f"<ScheduledWorkout(id={self.id}, schedule_id={self.schedule_id}, "
            f"date={self.scheduled_date}, status={self.status})>"
        )
