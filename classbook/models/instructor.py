# classbook/models/instructor.py
"""Instructor model: the people who run classes."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
import ulid

from classbook.database import Base
from classbook.models._time import now_utc


class Instructor(Base):
    __tablename__ = "instructors"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    # Portal login, when the instructor has one
    user_id = Column(String(26), ForeignKey("users.id"), nullable=True, unique=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)

    user = relationship("User", back_populates="instructor_profile")
    classes = relationship("ScheduledClass", back_populates="instructor")

    def __repr__(self) -> str:
        return f"<Instructor {self.name}>"
