# classbook/models/attendance.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from classbook.database import Base
from classbook.models._time import now_utc


class ClassAttendance(Base):
    """Attendance mark for one booking at one class. Its presence locks the booking."""

    __tablename__ = "class_attendance"

    __table_args__ = (
        UniqueConstraint("class_id", "booking_id", name="uq_class_attendance_class_booking"),
    )

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    class_id = Column(String(26), ForeignKey("classes.id"), nullable=False, index=True)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, index=True)
    attended = Column(Boolean, nullable=False, default=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)

    booking = relationship("Booking", back_populates="attendance")
