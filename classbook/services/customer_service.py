# classbook/services/customer_service.py
"""
Customer Service

Search, create and edit customers, and assemble the tabbed customer detail
view (personal, medical, paq, bookings and payments).
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from classbook.core.exceptions import NotFoundException, ValidationException
from classbook.models.booking import Booking
from classbook.models.customer import Customer
from classbook.models.payment import Payment
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.customer import (
    CustomerBookingEntry,
    CustomerCreate,
    CustomerDetailResponse,
    CustomerPaymentEntry,
    CustomerUpdate,
    MedicalTab,
    PaqTab,
    PersonalTab,
)
from classbook.services.base import BaseService


class CustomerService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("search_customers")
    def search_customers(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Customer]:
        return self.customer_repository.search(search=search, status=status, skip=skip, limit=limit)

    @BaseService.measure_operation("get_customer")
    def get_customer(self, customer_id: str) -> Customer:
        customer = self.customer_repository.get_by_id(customer_id, load_relationships=False)
        if customer is None:
            raise NotFoundException(f"Customer {customer_id} not found")
        return customer

    @BaseService.measure_operation("create_customer")
    def create_customer(self, data: CustomerCreate) -> Customer:
        self.log_operation("create_customer")
        if data.user_id and not self.user_repository.exists(id=data.user_id):
            raise ValidationException(f"User {data.user_id} does not exist")
        with self.transaction():
            customer = self.customer_repository.create(**data.model_dump())
        return customer

    @BaseService.measure_operation("update_customer")
    def update_customer(self, customer_id: str, data: CustomerUpdate) -> Customer:
        self.log_operation("update_customer", customer_id=customer_id)
        self.get_customer(customer_id)
        changes = data.model_dump(exclude_unset=True)
        for required in ("first_name", "surname"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"{required} cannot be cleared")
        with self.transaction():
            customer = self.customer_repository.update(customer_id, **changes)
        return customer

    @BaseService.measure_operation("get_customer_detail")
    def get_customer_detail(self, customer_id: str) -> CustomerDetailResponse:
        """
        Build the tabbed detail view for one customer.

        Payments cover both the customer's enrollments and the bookings
        staff entered directly, newest first.
        """
        customer = self.get_customer(customer_id)
        bookings = self.booking_repository.list_for_customer(customer_id)
        payments = self.payment_repository.list_for_customer(customer_id)

        return CustomerDetailResponse(
            id=customer.id,
            full_name=customer.full_name,
            status=customer.status,
            personal=PersonalTab.model_validate(customer),
            medical=MedicalTab(medical_history=customer.medical_history),
            paq=PaqTab(paq_form=bool(customer.paq_form)),
            bookings=[self._booking_entry(booking) for booking in bookings],
            payments=[self._payment_entry(payment) for payment in payments],
        )

    @staticmethod
    def _booking_entry(booking: Booking) -> CustomerBookingEntry:
        scheduled_class = booking.scheduled_class
        return CustomerBookingEntry(
            id=booking.id,
            class_id=booking.class_id,
            class_name=scheduled_class.name if scheduled_class else None,
            class_code=scheduled_class.code if scheduled_class else None,
            day_of_week=scheduled_class.day_of_week if scheduled_class else None,
            start_time=scheduled_class.start_time if scheduled_class else None,
            end_time=scheduled_class.end_time if scheduled_class else None,
            instructor_name=booking.instructor_name,
            booking_date=booking.booking_date,
            term=booking.term,
            is_free_trial=booking.is_free_trial,
        )

    @staticmethod
    def _payment_entry(payment: Payment) -> CustomerPaymentEntry:
        class_name = payment.booking.class_name if payment.booking else None
        return CustomerPaymentEntry(
            id=payment.id,
            amount=payment.amount,
            payment_method=payment.payment_method,
            payment_status=payment.payment_status,
            receipt_number=payment.receipt_number,
            payment_date=payment.payment_date,
            class_name=class_name,
            enrollment_id=payment.enrollment_id,
            booking_id=payment.booking_id,
        )
