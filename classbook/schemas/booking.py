# classbook/schemas/booking.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from classbook.core.enums import Term
from classbook.schemas.base import Money, StandardizedModel, StrictModel


class BookingCreate(StrictModel):
    """Staff booking entered from the dashboard."""

    customer_id: str = Field(..., min_length=1)
    class_id: str = Field(..., min_length=1)
    enrollment_id: Optional[str] = None
    booking_date: date
    term: Optional[Term] = Field(None, description="Defaults to the class's term")
    is_free_trial: bool = False


class BookingUpdate(StrictModel):
    class_id: Optional[str] = Field(None, min_length=1)
    booking_date: Optional[date] = None
    term: Optional[Term] = None
    is_free_trial: Optional[bool] = None


class BookingResponse(StandardizedModel):
    id: str
    customer_id: str
    customer_name: Optional[str] = None
    class_id: str
    class_name: Optional[str] = None
    enrollment_id: Optional[str] = None
    booking_date: date
    term: str
    is_free_trial: bool
    created_at: datetime


class BookingPaymentEntry(StandardizedModel):
    id: str
    amount: Money
    payment_method: str
    receipt_number: str
    payment_date: datetime


class BookingEnrollmentEntry(StandardizedModel):
    id: str
    enrollment_type: str
    payment_status: str
    status: str
    payment_intent: Optional[str] = None


class BookingDetailResponse(BookingResponse):
    has_attendance: bool = False
    instructor_name: Optional[str] = None
    enrollment: Optional[BookingEnrollmentEntry] = None
    payments: List[BookingPaymentEntry] = Field(default_factory=list)
