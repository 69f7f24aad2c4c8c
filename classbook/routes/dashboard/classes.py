# classbook/routes/dashboard/classes.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from classbook.api.dependencies import get_class_service, require_admin
from classbook.core.enums import Term
from classbook.schemas.scheduled_class import (
    ClassCreate,
    ClassDetailResponse,
    ClassResponse,
    ClassUpdate,
)
from classbook.services.class_service import ClassService

router = APIRouter(
    prefix="/classes", tags=["dashboard-classes"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=List[ClassResponse])
def list_classes(
    term: Optional[Term] = Query(None),
    instructor_id: Optional[str] = Query(None),
    exercise_type_id: Optional[str] = Query(None),
    service: ClassService = Depends(get_class_service),
) -> List[ClassResponse]:
    classes = service.list_classes(
        term=term.value if term else None,
        instructor_id=instructor_id,
        exercise_type_id=exercise_type_id,
    )
    return [ClassResponse.model_validate(scheduled_class) for scheduled_class in classes]


@router.post("", response_model=ClassDetailResponse, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassCreate, service: ClassService = Depends(get_class_service)
) -> ClassDetailResponse:
    return ClassDetailResponse.model_validate(service.create_class(payload))


@router.get("/{class_id}", response_model=ClassDetailResponse)
def get_class(
    class_id: str, service: ClassService = Depends(get_class_service)
) -> ClassDetailResponse:
    """Class with its instructor, exercise type and bookings."""
    return ClassDetailResponse.model_validate(service.get_class(class_id))


@router.put("/{class_id}", response_model=ClassDetailResponse)
def update_class(
    class_id: str,
    payload: ClassUpdate,
    service: ClassService = Depends(get_class_service),
) -> ClassDetailResponse:
    return ClassDetailResponse.model_validate(service.update_class(class_id, payload))
