# classbook/repositories/instructor_repository.py
from typing import List, Optional

from sqlalchemy.orm import Session

from classbook.models.instructor import Instructor
from classbook.repositories.base_repository import BaseRepository


class InstructorRepository(BaseRepository[Instructor]):
    def __init__(self, db: Session):
        super().__init__(db, Instructor)

    def list_instructors(self) -> List[Instructor]:
        return self._execute_query(self._build_query().order_by(Instructor.name.asc()))

    def get_by_user_id(self, user_id: str) -> Optional[Instructor]:
        return self.find_one_by(user_id=user_id)
