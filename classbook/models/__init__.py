"""
Database models for the classbook backend.

Importing this package registers every table on ``Base.metadata``:
- Accounts: User, Instructor
- Catalogue: ExerciseType, ScheduledClass
- Customers and their purchases: Customer, Enrollment, Booking, Payment
- Operations: ClassAttendance, WebhookEvent
"""

from classbook.models.attendance import ClassAttendance
from classbook.models.booking import Booking
from classbook.models.customer import Customer
from classbook.models.enrollment import Enrollment
from classbook.models.exercise_type import ExerciseType
from classbook.models.instructor import Instructor
from classbook.models.payment import Payment
from classbook.models.scheduled_class import ScheduledClass
from classbook.models.user import User
from classbook.models.webhook_event import WebhookEvent

__all__ = [
    "Booking",
    "ClassAttendance",
    "Customer",
    "Enrollment",
    "ExerciseType",
    "Instructor",
    "Payment",
    "ScheduledClass",
    "User",
    "WebhookEvent",
]
