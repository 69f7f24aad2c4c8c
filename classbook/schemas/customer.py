# classbook/schemas/customer.py
"""
Customer schemas.

The detail view is split into the same tabs staff see on the customer page:
personal, medical, paq, bookings and payments.
"""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import EmailStr, Field

from classbook.core.enums import CustomerStatus
from classbook.schemas.base import Money, StandardizedModel, StrictModel


class CustomerFields(StrictModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    contact_no: Optional[str] = Field(None, max_length=50)
    work_mobile: Optional[str] = Field(None, max_length=50)
    street_number: Optional[str] = Field(None, max_length=20)
    street_name: Optional[str] = Field(None, max_length=255)
    suburb: Optional[str] = Field(None, max_length=100)
    post_code: Optional[str] = Field(None, max_length=10)
    date_of_birth: Optional[date] = None
    country_of_birth: Optional[str] = Field(None, max_length=100)
    occupation: Optional[str] = Field(None, max_length=100)
    next_of_kin_name: Optional[str] = Field(None, max_length=255)
    next_of_kin_relationship: Optional[str] = Field(None, max_length=100)
    next_of_kin_mobile: Optional[str] = Field(None, max_length=50)
    next_of_kin_phone: Optional[str] = Field(None, max_length=50)
    medical_history: Optional[str] = None
    paq_form: bool = False
    status: CustomerStatus = CustomerStatus.ACTIVE


class CustomerCreate(CustomerFields):
    user_id: Optional[str] = None


class CustomerUpdate(StrictModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    surname: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    contact_no: Optional[str] = Field(None, max_length=50)
    work_mobile: Optional[str] = Field(None, max_length=50)
    street_number: Optional[str] = Field(None, max_length=20)
    street_name: Optional[str] = Field(None, max_length=255)
    suburb: Optional[str] = Field(None, max_length=100)
    post_code: Optional[str] = Field(None, max_length=10)
    date_of_birth: Optional[date] = None
    country_of_birth: Optional[str] = Field(None, max_length=100)
    occupation: Optional[str] = Field(None, max_length=100)
    next_of_kin_name: Optional[str] = Field(None, max_length=255)
    next_of_kin_relationship: Optional[str] = Field(None, max_length=100)
    next_of_kin_mobile: Optional[str] = Field(None, max_length=50)
    next_of_kin_phone: Optional[str] = Field(None, max_length=50)
    medical_history: Optional[str] = None
    paq_form: Optional[bool] = None
    status: Optional[CustomerStatus] = None


class CustomerResponse(StandardizedModel):
    id: str
    first_name: str
    surname: str
    full_name: str
    email: Optional[str] = None
    contact_no: Optional[str] = None
    suburb: Optional[str] = None
    paq_form: bool
    status: str
    created_at: datetime


class PersonalTab(StandardizedModel):
    first_name: str
    surname: str
    email: Optional[str] = None
    contact_no: Optional[str] = None
    work_mobile: Optional[str] = None
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    suburb: Optional[str] = None
    post_code: Optional[str] = None
    date_of_birth: Optional[date] = None
    country_of_birth: Optional[str] = None
    occupation: Optional[str] = None
    next_of_kin_name: Optional[str] = None
    next_of_kin_relationship: Optional[str] = None
    next_of_kin_mobile: Optional[str] = None
    next_of_kin_phone: Optional[str] = None


class MedicalTab(StandardizedModel):
    medical_history: Optional[str] = None


class PaqTab(StandardizedModel):
    paq_form: bool


class CustomerBookingEntry(StandardizedModel):
    id: str
    class_id: str
    class_name: Optional[str] = None
    class_code: Optional[str] = None
    day_of_week: Optional[int] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    instructor_name: Optional[str] = None
    booking_date: date
    term: str
    is_free_trial: bool


class CustomerPaymentEntry(StandardizedModel):
    id: str
    amount: Money
    payment_method: str
    payment_status: str
    receipt_number: str
    payment_date: datetime
    class_name: Optional[str] = None
    enrollment_id: Optional[str] = None
    booking_id: Optional[str] = None


class CustomerDetailResponse(StandardizedModel):
    id: str
    full_name: str
    status: str
    personal: PersonalTab
    medical: MedicalTab
    paq: PaqTab
    bookings: List[CustomerBookingEntry] = Field(default_factory=list)
    payments: List[CustomerPaymentEntry] = Field(default_factory=list)
