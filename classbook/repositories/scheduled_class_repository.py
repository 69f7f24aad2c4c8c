# classbook/repositories/scheduled_class_repository.py
"""Repository for the ``classes`` relation."""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from classbook.models.booking import Booking
from classbook.models.scheduled_class import ScheduledClass
from classbook.repositories.base_repository import BaseRepository


class ScheduledClassRepository(BaseRepository[ScheduledClass]):
    def __init__(self, db: Session):
        super().__init__(db, ScheduledClass)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(ScheduledClass.instructor),
            joinedload(ScheduledClass.exercise_type),
            selectinload(ScheduledClass.bookings).joinedload(Booking.customer),
        )

    def list_classes(
        self,
        *,
        term: Optional[str] = None,
        instructor_id: Optional[str] = None,
        exercise_type_id: Optional[str] = None,
    ) -> List[ScheduledClass]:
        query = self._build_query().options(joinedload(ScheduledClass.instructor))
        if term:
            query = query.filter(ScheduledClass.term == term)
        if instructor_id:
            query = query.filter(ScheduledClass.instructor_id == instructor_id)
        if exercise_type_id:
            query = query.filter(ScheduledClass.exercise_type_id == exercise_type_id)
        query = query.order_by(
            ScheduledClass.day_of_week.asc(),
            ScheduledClass.start_time.asc(),
            ScheduledClass.name.asc(),
        )
        return self._execute_query(query)

    def get_by_code(self, code: str) -> Optional[ScheduledClass]:
        return self.find_one_by(code=code)

    def get_many(self, class_ids: Iterable[str]) -> dict[str, ScheduledClass]:
        """Load the given classes keyed by id; unknown ids are simply absent."""
        ids = list(dict.fromkeys(class_ids))
        if not ids:
            return {}
        query = self._build_query().filter(ScheduledClass.id.in_(ids))
        return {row.id: row for row in self._execute_query(query)}

    def list_for_instructor(self, instructor_id: str) -> List[ScheduledClass]:
        query = (
            self._build_query()
            .filter(ScheduledClass.instructor_id == instructor_id)
            .options(
                selectinload(ScheduledClass.bookings).joinedload(Booking.customer),
                selectinload(ScheduledClass.bookings).selectinload(Booking.attendance),
            )
            .order_by(ScheduledClass.day_of_week.asc(), ScheduledClass.start_time.asc())
        )
        return self._execute_query(query)
