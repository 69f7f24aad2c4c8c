# classbook/models/customer.py
"""
Customer model.

Holds the enrolment form: contact details, address, next of kin, medical
history and whether the physical activity questionnaire (PAQ) was returned.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
import ulid

from classbook.core.enums import CustomerStatus
from classbook.database import Base
from classbook.models._time import now_utc


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    # Personal
    first_name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    contact_no = Column(String(50), nullable=True)
    work_mobile = Column(String(50), nullable=True)
    street_number = Column(String(20), nullable=True)
    street_name = Column(String(255), nullable=True)
    suburb = Column(String(100), nullable=True)
    post_code = Column(String(10), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    country_of_birth = Column(String(100), nullable=True)
    occupation = Column(String(100), nullable=True)

    # Next of kin
    next_of_kin_name = Column(String(255), nullable=True)
    next_of_kin_relationship = Column(String(100), nullable=True)
    next_of_kin_mobile = Column(String(50), nullable=True)
    next_of_kin_phone = Column(String(50), nullable=True)

    # Health
    medical_history = Column(Text, nullable=True)
    paq_form = Column(Boolean, nullable=False, default=False)

    status = Column(String(20), nullable=False, default=CustomerStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    enrollments = relationship("Enrollment", back_populates="customer")
    bookings = relationship("Booking", back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}"

    def __repr__(self) -> str:
        return f"<Customer {self.full_name}>"
