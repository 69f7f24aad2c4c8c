# classbook/schemas/instructor.py
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from classbook.schemas.base import StandardizedModel, StrictModel


class InstructorCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    user_id: Optional[str] = None


class InstructorUpdate(StrictModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    user_id: Optional[str] = None


class InstructorResponse(StandardizedModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime
