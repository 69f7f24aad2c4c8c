# classbook/models/user.py
"""
User model for dashboard and portal accounts.

Every person who signs in is a ``User``. The ``role`` column decides which
areas of the application the route guard lets them into:

- admin: the ``/dashboard`` area
- instructor: the instructor portal
- customer: the customer portal
"""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from classbook.core.enums import RoleName
from classbook.database import Base
from classbook.models._time import now_utc


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.CUSTOMER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    instructor_profile = relationship("Instructor", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    @property
    def is_instructor(self) -> bool:
        return self.role == RoleName.INSTRUCTOR.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
