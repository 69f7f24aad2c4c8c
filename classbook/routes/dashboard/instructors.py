# classbook/routes/dashboard/instructors.py
from typing import List

from fastapi import APIRouter, Depends, status

from classbook.api.dependencies import get_instructor_service, require_admin
from classbook.schemas.exercise_type import ExerciseTypeCreate, ExerciseTypeResponse
from classbook.schemas.instructor import InstructorCreate, InstructorResponse, InstructorUpdate
from classbook.services.instructor_service import InstructorService

router = APIRouter(
    prefix="/instructors", tags=["dashboard-instructors"], dependencies=[Depends(require_admin)]
)
exercise_types_router = APIRouter(
    prefix="/exercise-types",
    tags=["dashboard-exercise-types"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[InstructorResponse])
def list_instructors(
    service: InstructorService = Depends(get_instructor_service),
) -> List[InstructorResponse]:
    return [InstructorResponse.model_validate(row) for row in service.list_instructors()]


@router.post("", response_model=InstructorResponse, status_code=status.HTTP_201_CREATED)
def create_instructor(
    payload: InstructorCreate, service: InstructorService = Depends(get_instructor_service)
) -> InstructorResponse:
    return InstructorResponse.model_validate(service.create_instructor(payload))


@router.put("/{instructor_id}", response_model=InstructorResponse)
def update_instructor(
    instructor_id: str,
    payload: InstructorUpdate,
    service: InstructorService = Depends(get_instructor_service),
) -> InstructorResponse:
    return InstructorResponse.model_validate(service.update_instructor(instructor_id, payload))


@exercise_types_router.get("", response_model=List[ExerciseTypeResponse])
def list_exercise_types(
    service: InstructorService = Depends(get_instructor_service),
) -> List[ExerciseTypeResponse]:
    return [ExerciseTypeResponse.model_validate(row) for row in service.list_exercise_types()]


@exercise_types_router.post(
    "", response_model=ExerciseTypeResponse, status_code=status.HTTP_201_CREATED
)
def create_exercise_type(
    payload: ExerciseTypeCreate, service: InstructorService = Depends(get_instructor_service)
) -> ExerciseTypeResponse:
    return ExerciseTypeResponse.model_validate(service.create_exercise_type(payload))
