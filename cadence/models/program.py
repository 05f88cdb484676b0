"""Program catalog and enrollment models.

These tables belong to the program catalog; the scheduler only reads them.
"""
from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cadence.db.database import Base
from cadence.models.enums import EnrollmentStatus


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    duration_weeks = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    workouts = relationship("ProgramWorkout", back_populates="program", cascade="all, delete-orphan")
    enrollments = relationship("ProgramEnrollment", back_populates="program", cascade="all, delete-orphan")


class ProgramWorkout(Base):
    __tablename__ = "program_workouts"

    id = Column(Integer, primary_key=True, index=True)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False)
    week_number = Column(Integer, nullable=False)
    day_number = Column(Integer, nullable=False)  # 1-7 within the week
    name = Column(String(200), nullable=False)
    focus = Column(String(100), nullable=True)
    estimated_duration = Column(Integer, nullable=True)  # minutes

    program = relationship("Program", back_populates="workouts")

    __table_args__ = (
        Index("ix_program_workouts_program_order", "program_id", "week_number", "day_number"),
    )

    def __repr__(self):
        return f"<ProgramWorkout(id={self.id}, week={self.week_number}, day={self.day_number}, name={self.name!r})>"


class ProgramEnrollment(Base):
    __tablename__ = "program_enrollments"

    id = Column(Integer, primary_key=True, index=True)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    status = Column(
        Enum(EnrollmentStatus, name="enrollment_status", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        default=EnrollmentStatus.ACTIVE,
        nullable=False,
    )
    start_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    program = relationship("Program", back_populates="enrollments")
    schedule = relationship(
        "SchedulePreference",
        back_populates="enrollment",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("program_id", "user_id", name="uq_program_enrollment_user"),
    )
