# classbook/services/payment_service.py
"""
Payment Service

Read access to the payment ledger and manual recording of cash, card and
bank transfer payments. Payments are never edited or deleted.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from classbook.core.enums import PaymentStatus
from classbook.core.exceptions import NotFoundException, ValidationException
from classbook.models.payment import Payment
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.payment import PaymentCreate
from classbook.services.base import BaseService


class PaymentService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("list_payments")
    def list_payments(
        self,
        *,
        enrollment_id: Optional[str] = None,
        booking_id: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> List[Payment]:
        return self.payment_repository.list_payments(
            enrollment_id=enrollment_id, booking_id=booking_id, payment_method=payment_method
        )

    @BaseService.measure_operation("get_payment")
    def get_payment(self, payment_id: str) -> Payment:
        payment = self.payment_repository.get_by_id(payment_id, load_relationships=False)
        if payment is None:
            raise NotFoundException(f"Payment {payment_id} not found")
        return payment

    @BaseService.measure_operation("record_payment")
    def record_payment(self, data: PaymentCreate) -> Payment:
        """
        Record a payment taken outside the gateway.

        A receipt number is generated inside the same transaction as the
        payment row so the two are never out of step.
        """
        self.log_operation(
            "record_payment", enrollment_id=data.enrollment_id, booking_id=data.booking_id
        )
        customer_ids = set()
        if data.enrollment_id:
            enrollment = self.enrollment_repository.get_by_id(
                data.enrollment_id, load_relationships=False
            )
            if enrollment is None:
                raise ValidationException(f"Enrollment {data.enrollment_id} does not exist")
            customer_ids.add(enrollment.customer_id)
        if data.booking_id:
            booking = self.booking_repository.get_by_id(data.booking_id, load_relationships=False)
            if booking is None:
                raise ValidationException(f"Booking {data.booking_id} does not exist")
            customer_ids.add(booking.customer_id)
        if len(customer_ids) > 1:
            raise ValidationException("Enrollment and booking belong to different customers")

        with self.transaction():
            receipt_number = self.payment_repository.generate_receipt_number()
            payment = self.payment_repository.create(
                enrollment_id=data.enrollment_id,
                booking_id=data.booking_id,
                amount=data.amount,
                payment_method=data.payment_method,
                payment_status=PaymentStatus.COMPLETED.value,
                transaction_id=data.transaction_id,
                receipt_number=receipt_number,
                payment_date=data.payment_date or datetime.now(timezone.utc),
                notes=data.notes,
            )
        self.logger.info(f"Recorded manual payment {receipt_number}")
        return payment
