# classbook/models/booking.py
"""
Booking model.

A booking places one customer into one class for a term. Bookings come from
successful checkouts (with an enrollment) or are entered by staff (without).
"""

from typing import Optional

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
import ulid

from classbook.database import Base
from classbook.models._time import now_utc


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    customer_id = Column(String(26), ForeignKey("customers.id"), nullable=False, index=True)
    class_id = Column(String(26), ForeignKey("classes.id"), nullable=False, index=True)
    enrollment_id = Column(String(26), ForeignKey("enrollments.id"), nullable=True, index=True)
    booking_date = Column(Date, nullable=False)
    term = Column(String(10), nullable=False)
    is_free_trial = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    customer = relationship("Customer", back_populates="bookings")
    scheduled_class = relationship("ScheduledClass", back_populates="bookings")
    enrollment = relationship("Enrollment", back_populates="bookings")
    payments = relationship("Payment", back_populates="booking")
    attendance = relationship("ClassAttendance", back_populates="booking")

    @property
    def customer_name(self) -> Optional[str]:
        return self.customer.full_name if self.customer else None

    @property
    def class_name(self) -> Optional[str]:
        return self.scheduled_class.name if self.scheduled_class else None

    @property
    def instructor_name(self) -> Optional[str]:
        return self.scheduled_class.instructor_name if self.scheduled_class else None

    @property
    def has_attendance(self) -> bool:
        return bool(self.attendance)

    def __repr__(self) -> str:
        return f"<Booking {self.id} class={self.class_id} date={self.booking_date}>"
