# classbook/repositories/attendance_repository.py
from typing import Iterable, Set

from sqlalchemy.orm import Session

from classbook.models.attendance import ClassAttendance
from classbook.repositories.base_repository import BaseRepository


class AttendanceRepository(BaseRepository[ClassAttendance]):
    def __init__(self, db: Session):
        super().__init__(db, ClassAttendance)

    def recorded_booking_ids(self, class_id: str, booking_ids: Iterable[str]) -> Set[str]:
        """Return the subset of ``booking_ids`` that already have attendance for the class."""
        ids = list(booking_ids)
        if not ids:
            return set()
        query = self.db.query(ClassAttendance.booking_id).filter(
            ClassAttendance.class_id == class_id,
            ClassAttendance.booking_id.in_(ids),
        )
        return {row[0] for row in self._execute_query(query)}
