# classbook/schemas/enrollment.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from classbook.core.enums import EnrollmentType
from classbook.schemas.base import StandardizedModel, StrictModel
from classbook.schemas.booking import BookingResponse
from classbook.schemas.payment import PaymentResponse


class EnrollmentCreate(StrictModel):
    """Checkout initiation: a pending enrollment awaiting the gateway's verdict."""

    customer_id: str = Field(..., min_length=1)
    enrollment_type: EnrollmentType = EnrollmentType.STANDARD
    payment_intent: Optional[str] = Field(None, max_length=255)


class EnrollmentResponse(StandardizedModel):
    id: str
    customer_id: str
    enrollment_type: str
    payment_status: str
    status: str
    payment_intent: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class EnrollmentDetailResponse(EnrollmentResponse):
    customer_name: Optional[str] = None
    bookings: List[BookingResponse] = Field(default_factory=list)
    payments: List[PaymentResponse] = Field(default_factory=list)
