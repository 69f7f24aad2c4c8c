# classbook/routes/dashboard/payments.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from classbook.api.dependencies import get_payment_service, require_admin
from classbook.core.enums import PaymentMethod
from classbook.schemas.payment import PaymentCreate, PaymentResponse
from classbook.services.payment_service import PaymentService

router = APIRouter(
    prefix="/payments", tags=["dashboard-payments"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=List[PaymentResponse])
def list_payments(
    enrollment_id: Optional[str] = Query(None),
    booking_id: Optional[str] = Query(None),
    payment_method: Optional[PaymentMethod] = Query(None),
    service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    payments = service.list_payments(
        enrollment_id=enrollment_id,
        booking_id=booking_id,
        payment_method=payment_method.value if payment_method else None,
    )
    return [PaymentResponse.model_validate(payment) for payment in payments]


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: PaymentCreate, service: PaymentService = Depends(get_payment_service)
) -> PaymentResponse:
    """Record a cash, card or transfer payment and issue its receipt number."""
    return PaymentResponse.model_validate(service.record_payment(payload))


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str, service: PaymentService = Depends(get_payment_service)
) -> PaymentResponse:
    return PaymentResponse.model_validate(service.get_payment(payment_id))
