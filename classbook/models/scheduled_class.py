# classbook/models/scheduled_class.py
"""
Class model.

A class is a recurring weekly session (same weekday and time window) that
runs for one term. Customers are booked into it one ``Booking`` at a time.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
import ulid

from classbook.database import Base
from classbook.models._time import now_utc


class ScheduledClass(Base):
    __tablename__ = "classes"

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="check_class_day_of_week"),
        CheckConstraint("fee_amount >= 0", name="check_class_fee_non_negative"),
        CheckConstraint(
            "class_capacity IS NULL OR class_capacity >= 0", name="check_class_capacity"
        ),
    )

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, nullable=False)
    exercise_type_id = Column(String(26), ForeignKey("exercise_types.id"), nullable=True)
    venue = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    zip_code = Column(String(10), nullable=True)
    # ISO weekday: 1=Monday ... 7=Sunday
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    instructor_id = Column(String(26), ForeignKey("instructors.id"), nullable=True, index=True)
    fee_criteria = Column(String(255), nullable=False)
    fee_amount = Column(Numeric(10, 2), nullable=False, default=0)
    term = Column(String(10), nullable=False, index=True)
    class_capacity = Column(Integer, nullable=True)
    is_subsidised = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    instructor = relationship("Instructor", back_populates="classes")
    exercise_type = relationship("ExerciseType")
    bookings = relationship("Booking", back_populates="scheduled_class")

    @property
    def instructor_name(self) -> Optional[str]:
        return self.instructor.name if self.instructor else None

    def __repr__(self) -> str:
        return f"<ScheduledClass {self.code} {self.term}>"
