# classbook/schemas/attendance.py
from typing import List

from pydantic import Field

from classbook.schemas.base import StandardizedModel, StrictModel


class AttendanceRecordRequest(StrictModel):
    booking_ids: List[str] = Field(..., min_length=1)
    attended: bool = True


class AttendanceRecordResponse(StandardizedModel):
    class_id: str
    recorded: List[str] = Field(default_factory=list)
    already_recorded: List[str] = Field(default_factory=list)
