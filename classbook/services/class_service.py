# classbook/services/class_service.py
"""
Class Service

Business logic for the class timetable: listing, creating and editing the
recurring weekly classes that customers book into.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from classbook.core.exceptions import ConflictException, NotFoundException, ValidationException
from classbook.models.scheduled_class import ScheduledClass
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.scheduled_class import ClassCreate, ClassUpdate
from classbook.services.base import BaseService


class ClassService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.class_repository = RepositoryFactory.create_class_repository(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.exercise_type_repository = RepositoryFactory.create_exercise_type_repository(db)

    @BaseService.measure_operation("list_classes")
    def list_classes(
        self,
        *,
        term: Optional[str] = None,
        instructor_id: Optional[str] = None,
        exercise_type_id: Optional[str] = None,
    ) -> List[ScheduledClass]:
        return self.class_repository.list_classes(
            term=term, instructor_id=instructor_id, exercise_type_id=exercise_type_id
        )

    @BaseService.measure_operation("get_class")
    def get_class(self, class_id: str) -> ScheduledClass:
        scheduled_class = self.class_repository.get_by_id(class_id)
        if scheduled_class is None:
            raise NotFoundException(f"Class {class_id} not found")
        return scheduled_class

    @BaseService.measure_operation("create_class")
    def create_class(self, data: ClassCreate) -> ScheduledClass:
        self.log_operation("create_class", code=data.code)
        self._check_references(data.instructor_id, data.exercise_type_id)
        if self.class_repository.get_by_code(data.code):
            raise ConflictException(
                f"A class with code {data.code} already exists", code="CLASS_CODE_TAKEN"
            )

        with self.transaction():
            scheduled_class = self.class_repository.create(**data.model_dump())
        return self.get_class(scheduled_class.id)

    @BaseService.measure_operation("update_class")
    def update_class(self, class_id: str, data: ClassUpdate) -> ScheduledClass:
        self.log_operation("update_class", class_id=class_id)
        scheduled_class = self.get_class(class_id)
        changes = data.model_dump(exclude_unset=True)

        start = changes.get("start_time", scheduled_class.start_time)
        end = changes.get("end_time", scheduled_class.end_time)
        if end <= start:
            raise ValidationException("End time must be after start time")

        self._check_references(changes.get("instructor_id"), changes.get("exercise_type_id"))
        new_code = changes.get("code")
        if new_code and new_code != scheduled_class.code:
            existing = self.class_repository.get_by_code(new_code)
            if existing is not None and existing.id != class_id:
                raise ConflictException(
                    f"A class with code {new_code} already exists", code="CLASS_CODE_TAKEN"
                )

        with self.transaction():
            self.class_repository.update(class_id, **changes)
        self.db.expire_all()
        return self.get_class(class_id)

    def _check_references(
        self, instructor_id: Optional[str], exercise_type_id: Optional[str]
    ) -> None:
        if instructor_id and not self.instructor_repository.exists(id=instructor_id):
            raise ValidationException(f"Instructor {instructor_id} does not exist")
        if exercise_type_id and not self.exercise_type_repository.exists(id=exercise_type_id):
            raise ValidationException(f"Exercise type {exercise_type_id} does not exist")
