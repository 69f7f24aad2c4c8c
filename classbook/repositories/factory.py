# classbook/repositories/factory.py
"""
Repository Factory for the classbook backend.

Provides centralized creation of repository instances, ensuring
consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from classbook.repositories.attendance_repository import AttendanceRepository
from classbook.repositories.booking_repository import BookingRepository
from classbook.repositories.customer_repository import CustomerRepository
from classbook.repositories.enrollment_repository import EnrollmentRepository
from classbook.repositories.exercise_type_repository import ExerciseTypeRepository
from classbook.repositories.instructor_repository import InstructorRepository
from classbook.repositories.payment_repository import PaymentRepository
from classbook.repositories.scheduled_class_repository import ScheduledClassRepository
from classbook.repositories.user_repository import UserRepository
from classbook.repositories.webhook_event_repository import WebhookEventRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_instructor_repository(db: Session) -> InstructorRepository:
        return InstructorRepository(db)

    @staticmethod
    def create_exercise_type_repository(db: Session) -> ExerciseTypeRepository:
        return ExerciseTypeRepository(db)

    @staticmethod
    def create_class_repository(db: Session) -> ScheduledClassRepository:
        return ScheduledClassRepository(db)

    @staticmethod
    def create_customer_repository(db: Session) -> CustomerRepository:
        return CustomerRepository(db)

    @staticmethod
    def create_enrollment_repository(db: Session) -> EnrollmentRepository:
        return EnrollmentRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        return BookingRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> PaymentRepository:
        return PaymentRepository(db)

    @staticmethod
    def create_attendance_repository(db: Session) -> AttendanceRepository:
        return AttendanceRepository(db)

    @staticmethod
    def create_webhook_event_repository(db: Session) -> WebhookEventRepository:
        return WebhookEventRepository(db)
