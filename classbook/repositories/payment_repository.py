# classbook/repositories/payment_repository.py
"""
Repository for the append-only ``payments`` ledger.

Receipt numbers come from the database: on Postgres the
``generate_receipt_number()`` function installed by the initial migration
(backed by a sequence), elsewhere the next ordinal of the payments table.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from classbook.core.exceptions import RepositoryException
from classbook.models.booking import Booking
from classbook.models.enrollment import Enrollment
from classbook.models.payment import Payment
from classbook.repositories.base_repository import AppendOnlyRepository

RECEIPT_PREFIX = "RCP"


def format_receipt_number(ordinal: int, when: Optional[datetime] = None) -> str:
    """Render ``RCP-YYYYMMDD-000042``, the same shape the Postgres function emits."""
    when = when or datetime.now(timezone.utc)
    return f"{RECEIPT_PREFIX}-{when:%Y%m%d}-{ordinal:06d}"


class PaymentRepository(AppendOnlyRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def generate_receipt_number(self) -> str:
        try:
            if self.dialect_name == "postgresql":
                return str(self.db.execute(text("SELECT generate_receipt_number()")).scalar_one())
            existing = self.db.query(func.count(Payment.id)).scalar() or 0
        except SQLAlchemyError as e:
            self.logger.error(f"Receipt number generation failed: {str(e)}")
            raise RepositoryException(f"Failed to generate receipt number: {str(e)}") from e
        return format_receipt_number(int(existing) + 1)

    def list_payments(
        self,
        *,
        enrollment_id: Optional[str] = None,
        booking_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        limit: int = 200,
    ) -> List[Payment]:
        query = self._build_query()
        if enrollment_id:
            query = query.filter(Payment.enrollment_id == enrollment_id)
        if booking_id:
            query = query.filter(Payment.booking_id == booking_id)
        if payment_method:
            query = query.filter(Payment.payment_method == payment_method)
        return self._execute_query(query.order_by(Payment.payment_date.desc()).limit(limit))

    def list_for_customer(self, customer_id: str) -> List[Payment]:
        """Payments tied to any of the customer's bookings or enrollments, newest first."""
        booking_ids = select(Booking.id).where(Booking.customer_id == customer_id)
        enrollment_ids = select(Enrollment.id).where(Enrollment.customer_id == customer_id)
        query = (
            self._build_query()
            .options(joinedload(Payment.booking).joinedload(Booking.scheduled_class))
            .filter(
                or_(
                    Payment.booking_id.in_(booking_ids),
                    Payment.enrollment_id.in_(enrollment_ids),
                )
            )
            .order_by(Payment.payment_date.desc())
        )
        return self._execute_query(query)
