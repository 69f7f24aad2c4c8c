# classbook/schemas/auth.py
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from classbook.schemas.base import StandardizedModel, StrictModel


def safe_redirect(value: Optional[str]) -> str:
    # Only same-site absolute paths; anything else falls back to home
    if not value or not value.startswith("/") or value.startswith("//"):
        return "/"
    return value


class LoginRequest(StrictModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    redirect_to: Optional[str] = None

    @field_validator("redirect_to")
    @classmethod
    def _normalize_redirect(cls, value: Optional[str]) -> str:
        return safe_redirect(value)


class SignupRequest(StrictModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    full_name: Optional[str] = Field(None, max_length=255)


class UserResponse(StandardizedModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None


class LoginResponse(StandardizedModel):
    redirect_to: str
    user: UserResponse


class AuthPageResponse(StandardizedModel):
    """Descriptor for the login/signup pages rendered by the frontend."""

    page: str
    redirect_to: str = "/"
    submit_to: str
