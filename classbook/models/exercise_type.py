# classbook/models/exercise_type.py
from sqlalchemy import Column, String
import ulid

from classbook.database import Base


class ExerciseType(Base):
    """Lookup table of class disciplines (aqua, strength, yoga...)."""

    __tablename__ = "exercise_types"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<ExerciseType {self.name}>"
