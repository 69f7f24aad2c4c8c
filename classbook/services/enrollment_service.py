# classbook/services/enrollment_service.py
"""
Enrollment Service

Enrollments are read-only for staff: checkout creates them and gateway
reconciliation moves their payment status. The only write here is checkout
initiation.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from classbook.core.enums import EnrollmentPaymentStatus, EnrollmentStatus
from classbook.core.exceptions import ConflictException, NotFoundException, ValidationException
from classbook.models.enrollment import Enrollment
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.booking import BookingResponse
from classbook.schemas.enrollment import EnrollmentCreate, EnrollmentDetailResponse
from classbook.schemas.payment import PaymentResponse
from classbook.services.base import BaseService


class EnrollmentService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)

    @BaseService.measure_operation("list_enrollments")
    def list_enrollments(
        self, *, customer_id: Optional[str] = None, payment_status: Optional[str] = None
    ) -> List[Enrollment]:
        return self.enrollment_repository.list_enrollments(
            customer_id=customer_id, payment_status=payment_status
        )

    @BaseService.measure_operation("get_enrollment")
    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        enrollment = self.enrollment_repository.get_by_id(enrollment_id)
        if enrollment is None:
            raise NotFoundException(f"Enrollment {enrollment_id} not found")
        return enrollment

    @BaseService.measure_operation("get_enrollment_detail")
    def get_enrollment_detail(self, enrollment_id: str) -> EnrollmentDetailResponse:
        enrollment = self.get_enrollment(enrollment_id)
        return EnrollmentDetailResponse(
            id=enrollment.id,
            customer_id=enrollment.customer_id,
            enrollment_type=enrollment.enrollment_type,
            payment_status=enrollment.payment_status,
            status=enrollment.status,
            payment_intent=enrollment.payment_intent,
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
            customer_name=enrollment.customer_name,
            bookings=[BookingResponse.model_validate(booking) for booking in enrollment.bookings],
            payments=[PaymentResponse.model_validate(payment) for payment in enrollment.payments],
        )

    @BaseService.measure_operation("start_checkout")
    def start_checkout(self, data: EnrollmentCreate) -> Enrollment:
        """
        Open a pending enrollment for a customer about to pay.

        Raises:
            ValidationException: Unknown customer
            ConflictException: The payment intent is already attached to an enrollment
        """
        self.log_operation("start_checkout", customer_id=data.customer_id)
        if not self.customer_repository.exists(id=data.customer_id):
            raise ValidationException(f"Customer {data.customer_id} does not exist")
        if data.payment_intent and self.enrollment_repository.get_by_payment_intent(
            data.payment_intent
        ):
            raise ConflictException(
                f"Payment intent {data.payment_intent} already has an enrollment",
                code="PAYMENT_INTENT_TAKEN",
            )

        with self.transaction():
            enrollment = self.enrollment_repository.create(
                customer_id=data.customer_id,
                enrollment_type=data.enrollment_type,
                payment_intent=data.payment_intent,
                payment_status=EnrollmentPaymentStatus.PENDING.value,
                status=EnrollmentStatus.ACTIVE.value,
            )
        return enrollment
