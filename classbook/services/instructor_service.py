# classbook/services/instructor_service.py
from typing import List

from sqlalchemy.orm import Session

from classbook.core.exceptions import ConflictException, NotFoundException, ValidationException
from classbook.models.exercise_type import ExerciseType
from classbook.models.instructor import Instructor
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.exercise_type import ExerciseTypeCreate
from classbook.schemas.instructor import InstructorCreate, InstructorUpdate
from classbook.services.base import BaseService


class InstructorService(BaseService):
    """Instructor records and the exercise types their classes are filed under."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.exercise_type_repository = RepositoryFactory.create_exercise_type_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("list_instructors")
    def list_instructors(self) -> List[Instructor]:
        return self.instructor_repository.list_instructors()

    @BaseService.measure_operation("create_instructor")
    def create_instructor(self, data: InstructorCreate) -> Instructor:
        self._check_user_link(data.user_id, None)
        with self.transaction():
            instructor = self.instructor_repository.create(**data.model_dump())
        return instructor

    @BaseService.measure_operation("update_instructor")
    def update_instructor(self, instructor_id: str, data: InstructorUpdate) -> Instructor:
        changes = data.model_dump(exclude_unset=True)
        if self.instructor_repository.get_by_id(instructor_id, load_relationships=False) is None:
            raise NotFoundException(f"Instructor {instructor_id} not found")
        if "user_id" in changes:
            self._check_user_link(changes["user_id"], instructor_id)
        with self.transaction():
            instructor = self.instructor_repository.update(instructor_id, **changes)
        return instructor

    @BaseService.measure_operation("list_exercise_types")
    def list_exercise_types(self) -> List[ExerciseType]:
        return self.exercise_type_repository.list_exercise_types()

    @BaseService.measure_operation("create_exercise_type")
    def create_exercise_type(self, data: ExerciseTypeCreate) -> ExerciseType:
        if self.exercise_type_repository.get_by_name(data.name):
            raise ConflictException(f"Exercise type {data.name} already exists")
        with self.transaction():
            exercise_type = self.exercise_type_repository.create(name=data.name)
        return exercise_type

    def _check_user_link(self, user_id, instructor_id) -> None:
        if not user_id:
            return
        if self.user_repository.get_by_id(user_id, load_relationships=False) is None:
            raise ValidationException(f"User {user_id} does not exist")
        linked = self.instructor_repository.get_by_user_id(user_id)
        if linked is not None and linked.id != instructor_id:
            raise ConflictException("That user is already linked to another instructor")
