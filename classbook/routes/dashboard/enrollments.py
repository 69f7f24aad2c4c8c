# classbook/routes/dashboard/enrollments.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from classbook.api.dependencies import get_enrollment_service, require_admin
from classbook.core.enums import EnrollmentPaymentStatus
from classbook.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentDetailResponse,
    EnrollmentResponse,
)
from classbook.services.enrollment_service import EnrollmentService

router = APIRouter(
    prefix="/enrollments", tags=["dashboard-enrollments"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=List[EnrollmentResponse])
def list_enrollments(
    customer_id: Optional[str] = Query(None),
    payment_status: Optional[EnrollmentPaymentStatus] = Query(None),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> List[EnrollmentResponse]:
    enrollments = service.list_enrollments(
        customer_id=customer_id,
        payment_status=payment_status.value if payment_status else None,
    )
    return [EnrollmentResponse.model_validate(enrollment) for enrollment in enrollments]


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def start_checkout(
    payload: EnrollmentCreate, service: EnrollmentService = Depends(get_enrollment_service)
) -> EnrollmentResponse:
    """Open a pending enrollment; the gateway's webhook settles it later."""
    return EnrollmentResponse.model_validate(service.start_checkout(payload))


@router.get("/{enrollment_id}", response_model=EnrollmentDetailResponse)
def get_enrollment(
    enrollment_id: str, service: EnrollmentService = Depends(get_enrollment_service)
) -> EnrollmentDetailResponse:
    return service.get_enrollment_detail(enrollment_id)
