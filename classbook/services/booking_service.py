# classbook/services/booking_service.py
"""
Booking Service

Staff-side booking management. Checkout bookings are created by payment
reconciliation; this service covers the ones entered from the dashboard and
the edits staff make afterwards. A booking with recorded attendance is
locked.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from classbook.core.exceptions import BookingLockedException, NotFoundException, ValidationException
from classbook.models.booking import Booking
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingEnrollmentEntry,
    BookingPaymentEntry,
    BookingUpdate,
)
from classbook.services.base import BaseService


class BookingService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.class_repository = RepositoryFactory.create_class_repository(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        *,
        class_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        enrollment_id: Optional[str] = None,
    ) -> List[Booking]:
        return self.booking_repository.list_bookings(
            class_id=class_id, customer_id=customer_id, enrollment_id=enrollment_id
        )

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException(f"Booking {booking_id} not found")
        return booking

    @BaseService.measure_operation("create_booking")
    def create_booking(self, data: BookingCreate) -> Booking:
        """
        Create a staff booking.

        Args:
            data: Booking details; the term defaults to the class's term

        Returns:
            The created booking

        Raises:
            ValidationException: Unknown customer, class or enrollment
        """
        self.log_operation("create_booking", class_id=data.class_id, customer_id=data.customer_id)
        if not self.customer_repository.exists(id=data.customer_id):
            raise ValidationException(f"Customer {data.customer_id} does not exist")
        scheduled_class = self.class_repository.get_by_id(data.class_id, load_relationships=False)
        if scheduled_class is None:
            raise ValidationException(f"Class {data.class_id} does not exist")
        if data.enrollment_id:
            enrollment = self.enrollment_repository.get_by_id(
                data.enrollment_id, load_relationships=False
            )
            if enrollment is None or enrollment.customer_id != data.customer_id:
                raise ValidationException(
                    f"Enrollment {data.enrollment_id} does not belong to this customer"
                )

        with self.transaction():
            booking = self.booking_repository.create(
                customer_id=data.customer_id,
                class_id=scheduled_class.id,
                enrollment_id=data.enrollment_id,
                booking_date=data.booking_date,
                term=data.term or scheduled_class.term,
                is_free_trial=data.is_free_trial,
            )
        return self.get_booking(booking.id)

    @BaseService.measure_operation("update_booking")
    def update_booking(self, booking_id: str, data: BookingUpdate) -> Booking:
        self.log_operation("update_booking", booking_id=booking_id)
        self.get_booking(booking_id)
        if self.booking_repository.has_attendance(booking_id):
            raise BookingLockedException(booking_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("class_id") and not self.class_repository.exists(id=changes["class_id"]):
            raise ValidationException(f"Class {changes['class_id']} does not exist")
        for required in ("class_id", "booking_date", "term", "is_free_trial"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"{required} cannot be cleared")

        with self.transaction():
            self.booking_repository.update(booking_id, **changes)
        self.db.expire_all()
        return self.get_booking(booking_id)

    @BaseService.measure_operation("get_booking_detail")
    def get_booking_detail(self, booking_id: str) -> BookingDetailResponse:
        booking = self.get_booking(booking_id)
        enrollment = booking.enrollment
        return BookingDetailResponse(
            id=booking.id,
            customer_id=booking.customer_id,
            customer_name=booking.customer_name,
            class_id=booking.class_id,
            class_name=booking.class_name,
            enrollment_id=booking.enrollment_id,
            booking_date=booking.booking_date,
            term=booking.term,
            is_free_trial=booking.is_free_trial,
            created_at=booking.created_at,
            has_attendance=self.booking_repository.has_attendance(booking.id),
            instructor_name=booking.instructor_name,
            enrollment=BookingEnrollmentEntry.model_validate(enrollment) if enrollment else None,
            payments=[BookingPaymentEntry.model_validate(payment) for payment in booking.payments],
        )
