# classbook/schemas/instructor_portal.py
from datetime import date, time
from typing import List, Optional

from pydantic import Field

from classbook.schemas.base import StandardizedModel


class PortalBookingEntry(StandardizedModel):
    id: str
    customer_id: str
    customer_name: Optional[str] = None
    booking_date: date
    is_free_trial: bool
    has_attendance: bool = False


class PortalClassEntry(StandardizedModel):
    id: str
    name: str
    code: str
    venue: str
    day_of_week: int
    start_time: time
    end_time: time
    term: str
    class_capacity: Optional[int] = None
    bookings: List[PortalBookingEntry] = Field(default_factory=list)


class InstructorPortalSummary(StandardizedModel):
    instructor_id: str
    name: str
    email: Optional[str] = None
    class_count: int
    booking_count: int
