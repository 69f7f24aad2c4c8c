# classbook/schemas/exercise_type.py
from pydantic import Field

from classbook.schemas.base import StandardizedModel, StrictModel


class ExerciseTypeCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=100)


class ExerciseTypeResponse(StandardizedModel):
    id: str
    name: str
