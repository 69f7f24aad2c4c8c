# classbook/repositories/enrollment_repository.py
from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from classbook.models.booking import Booking
from classbook.models.enrollment import Enrollment
from classbook.repositories.base_repository import BaseRepository


class EnrollmentRepository(BaseRepository[Enrollment]):
    def __init__(self, db: Session):
        super().__init__(db, Enrollment)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Enrollment.customer),
            selectinload(Enrollment.bookings).joinedload(Booking.scheduled_class),
            selectinload(Enrollment.payments),
        )

    def get_by_payment_intent(self, payment_intent_id: str) -> Optional[Enrollment]:
        query = (
            self._build_query()
            .filter(Enrollment.payment_intent == payment_intent_id)
            .order_by(Enrollment.created_at.desc())
            .limit(1)
        )
        results = self._execute_query(query)
        return results[0] if results else None

    def list_enrollments(
        self,
        *,
        customer_id: Optional[str] = None,
        payment_status: Optional[str] = None,
        limit: int = 100,
    ) -> List[Enrollment]:
        query = self._build_query().options(joinedload(Enrollment.customer))
        if customer_id:
            query = query.filter(Enrollment.customer_id == customer_id)
        if payment_status:
            query = query.filter(Enrollment.payment_status == payment_status)
        return self._execute_query(query.order_by(Enrollment.created_at.desc()).limit(limit))
