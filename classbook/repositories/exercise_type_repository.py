# classbook/repositories/exercise_type_repository.py
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from classbook.models.exercise_type import ExerciseType
from classbook.repositories.base_repository import BaseRepository


class ExerciseTypeRepository(BaseRepository[ExerciseType]):
    def __init__(self, db: Session):
        super().__init__(db, ExerciseType)

    def list_exercise_types(self) -> List[ExerciseType]:
        return self._execute_query(self._build_query().order_by(ExerciseType.name.asc()))

    def get_by_name(self, name: str) -> Optional[ExerciseType]:
        query = self._build_query().filter(func.lower(ExerciseType.name) == name.strip().lower())
        results = self._execute_query(query.limit(1))
        return results[0] if results else None
