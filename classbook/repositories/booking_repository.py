# classbook/repositories/booking_repository.py
from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from classbook.models.attendance import ClassAttendance
from classbook.models.booking import Booking
from classbook.models.scheduled_class import ScheduledClass
from classbook.repositories.base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.customer),
            joinedload(Booking.enrollment),
            joinedload(Booking.scheduled_class).joinedload(ScheduledClass.instructor),
            selectinload(Booking.payments),
        )

    def list_bookings(
        self,
        *,
        class_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        enrollment_id: Optional[str] = None,
        limit: int = 200,
    ) -> List[Booking]:
        query = self._build_query().options(
            joinedload(Booking.customer), joinedload(Booking.scheduled_class)
        )
        if class_id:
            query = query.filter(Booking.class_id == class_id)
        if customer_id:
            query = query.filter(Booking.customer_id == customer_id)
        if enrollment_id:
            query = query.filter(Booking.enrollment_id == enrollment_id)
        query = query.order_by(Booking.booking_date.desc(), Booking.created_at.desc())
        return self._execute_query(query.limit(limit))

    def list_for_customer(self, customer_id: str) -> List[Booking]:
        """Customer bookings with their class and instructor, newest first."""
        query = (
            self._build_query()
            .filter(Booking.customer_id == customer_id)
            .options(joinedload(Booking.scheduled_class).joinedload(ScheduledClass.instructor))
            .order_by(Booking.booking_date.desc())
        )
        return self._execute_query(query)

    def has_attendance(self, booking_id: str) -> bool:
        query = self.db.query(ClassAttendance.id).filter(ClassAttendance.booking_id == booking_id)
        return self._execute_scalar(query.limit(1)) is not None
