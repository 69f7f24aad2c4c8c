# classbook/schemas/scheduled_class.py
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from classbook.core.enums import Term
from classbook.schemas.base import Money, StandardizedModel, StrictModel
from classbook.schemas.exercise_type import ExerciseTypeResponse
from classbook.schemas.instructor import InstructorResponse


def _check_time_window(start: Optional[time], end: Optional[time]) -> None:
    if start is not None and end is not None and end <= start:
        raise ValueError("End time must be after start time")


class ClassCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    exercise_type_id: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    zip_code: Optional[str] = Field(None, max_length=10)
    day_of_week: int = Field(..., ge=1, le=7, description="1=Monday ... 7=Sunday")
    start_time: time
    end_time: time
    instructor_id: str = Field(..., min_length=1)
    fee_criteria: str = Field(..., min_length=1, max_length=255)
    fee_amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    term: Term
    class_capacity: Optional[int] = Field(None, ge=0)
    is_subsidised: bool = False

    @model_validator(mode="after")
    def _end_after_start(self) -> "ClassCreate":
        _check_time_window(self.start_time, self.end_time)
        return self


class ClassUpdate(StrictModel):
    """Partial update; only provided fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    exercise_type_id: Optional[str] = Field(None, min_length=1)
    venue: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1)
    zip_code: Optional[str] = Field(None, max_length=10)
    day_of_week: Optional[int] = Field(None, ge=1, le=7)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    instructor_id: Optional[str] = Field(None, min_length=1)
    fee_criteria: Optional[str] = Field(None, min_length=1, max_length=255)
    fee_amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    term: Optional[Term] = None
    class_capacity: Optional[int] = Field(None, ge=0)
    is_subsidised: Optional[bool] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "ClassUpdate":
        _check_time_window(self.start_time, self.end_time)
        return self


class ClassResponse(StandardizedModel):
    id: str
    name: str
    code: str
    exercise_type_id: Optional[str] = None
    venue: str
    address: str
    zip_code: Optional[str] = None
    day_of_week: int
    start_time: time
    end_time: time
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None
    fee_criteria: str
    fee_amount: Money
    term: str
    class_capacity: Optional[int] = None
    is_subsidised: bool
    created_at: datetime
    updated_at: datetime


class ClassBookingSummary(StandardizedModel):
    id: str
    customer_id: str
    customer_name: Optional[str] = None
    enrollment_id: Optional[str] = None
    booking_date: date
    is_free_trial: bool


class ClassDetailResponse(ClassResponse):
    instructor: Optional[InstructorResponse] = None
    exercise_type: Optional[ExerciseTypeResponse] = None
    bookings: List[ClassBookingSummary] = Field(default_factory=list)
