# classbook/schemas/payment.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from classbook.schemas.base import Money, StandardizedModel, StrictModel


class ManualPaymentMethod(str, Enum):
    """Methods staff can record by hand; card-not-present Stripe payments come from webhooks."""

    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentCreate(StrictModel):
    enrollment_id: Optional[str] = None
    booking_id: Optional[str] = None
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: ManualPaymentMethod
    transaction_id: Optional[str] = Field(None, max_length=255)
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _requires_target(self) -> "PaymentCreate":
        if not self.enrollment_id and not self.booking_id:
            raise ValueError("A payment must reference an enrollment or a booking")
        return self


class PaymentResponse(StandardizedModel):
    id: str
    enrollment_id: Optional[str] = None
    booking_id: Optional[str] = None
    amount: Money
    payment_method: str
    payment_status: str
    transaction_id: Optional[str] = None
    receipt_number: str
    payment_date: datetime
    notes: Optional[str] = None
    created_at: datetime
