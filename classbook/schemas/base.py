# classbook/schemas/base.py
"""
Base models shared by request and response schemas.

Requests are strict (unknown fields rejected); responses read straight
from ORM rows.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer

# Amounts are Numeric(10, 2) in the database and plain numbers in JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class StandardizedModel(BaseModel):
    """Response base built from ORM attributes."""

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True, from_attributes=True)


class StrictModel(BaseModel):
    """Request base: forbid extras, validate defaults and assignments."""

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        validate_assignment=True,
        use_enum_values=True,
    )
