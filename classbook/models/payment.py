# classbook/models/payment.py
"""
Payment model.

Payments are an append-only ledger of completed money movement. Rows are
written once (by reconciliation or by staff recording a manual payment) and
never updated afterwards.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from classbook.core.enums import PaymentStatus
from classbook.database import Base
from classbook.models._time import now_utc


class Payment(Base):
    __tablename__ = "payments"

    __table_args__ = (CheckConstraint("amount >= 0", name="check_payment_amount_non_negative"),)

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    enrollment_id = Column(String(26), ForeignKey("enrollments.id"), nullable=True, index=True)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.COMPLETED.value)
    transaction_id = Column(String(255), nullable=True)
    receipt_number = Column(String(50), unique=True, nullable=False)
    payment_date = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)

    enrollment = relationship("Enrollment", back_populates="payments")
    booking = relationship("Booking", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment {self.receipt_number} {self.amount}>"
