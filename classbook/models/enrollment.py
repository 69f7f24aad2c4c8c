# classbook/models/enrollment.py
"""
Enrollment model.

One enrollment is one checkout: it is created ``pending`` when the customer
starts paying and afterwards only gateway events move its payment fields.
"""

from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
import ulid

from classbook.core.enums import EnrollmentPaymentStatus, EnrollmentStatus, EnrollmentType
from classbook.database import Base
from classbook.models._time import now_utc


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    customer_id = Column(String(26), ForeignKey("customers.id"), nullable=False, index=True)
    enrollment_type = Column(String(20), nullable=False, default=EnrollmentType.STANDARD.value)
    payment_status = Column(
        String(20), nullable=False, default=EnrollmentPaymentStatus.PENDING.value
    )
    status = Column(String(20), nullable=False, default=EnrollmentStatus.ACTIVE.value)
    # Stripe PaymentIntent id
    payment_intent = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    customer = relationship("Customer", back_populates="enrollments")
    bookings = relationship("Booking", back_populates="enrollment")
    payments = relationship("Payment", back_populates="enrollment")

    @property
    def customer_name(self) -> Optional[str]:
        return self.customer.full_name if self.customer else None

    def __repr__(self) -> str:
        return f"<Enrollment {self.id} {self.payment_status}/{self.status}>"
