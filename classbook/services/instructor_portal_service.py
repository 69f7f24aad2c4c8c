# classbook/services/instructor_portal_service.py
"""
Instructor Portal Service

What a signed-in instructor sees: their own classes, who is booked into
them, and attendance taking.
"""

from typing import List

from sqlalchemy.orm import Session

from classbook.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from classbook.models.instructor import Instructor
from classbook.models.scheduled_class import ScheduledClass
from classbook.repositories.factory import RepositoryFactory
from classbook.schemas.attendance import AttendanceRecordRequest, AttendanceRecordResponse
from classbook.schemas.instructor_portal import (
    InstructorPortalSummary,
    PortalBookingEntry,
    PortalClassEntry,
)
from classbook.services.base import BaseService


class InstructorPortalService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.class_repository = RepositoryFactory.create_class_repository(db)
        self.attendance_repository = RepositoryFactory.create_attendance_repository(db)

    def get_instructor_for_user(self, user_id: str) -> Instructor:
        instructor = self.instructor_repository.get_by_user_id(user_id)
        if instructor is None:
            raise NotFoundException(
                "No instructor profile is linked to this account", code="INSTRUCTOR_NOT_LINKED"
            )
        return instructor

    @BaseService.measure_operation("portal_summary")
    def get_summary(self, user_id: str) -> InstructorPortalSummary:
        instructor = self.get_instructor_for_user(user_id)
        classes = self.class_repository.list_for_instructor(instructor.id)
        return InstructorPortalSummary(
            instructor_id=instructor.id,
            name=instructor.name,
            email=instructor.email,
            class_count=len(classes),
            booking_count=sum(len(scheduled_class.bookings) for scheduled_class in classes),
        )

    @BaseService.measure_operation("portal_classes")
    def list_classes(self, user_id: str) -> List[PortalClassEntry]:
        instructor = self.get_instructor_for_user(user_id)
        return [
            self._class_entry(scheduled_class)
            for scheduled_class in self.class_repository.list_for_instructor(instructor.id)
        ]

    @BaseService.measure_operation("record_attendance")
    def record_attendance(
        self, user_id: str, class_id: str, data: AttendanceRecordRequest
    ) -> AttendanceRecordResponse:
        """
        Mark the given bookings as attended.

        Every booking must belong to the class. Bookings that already have
        attendance for the class are reported back and left untouched.

        Raises:
            NotFoundException: Unknown class
            ForbiddenException: The class is taught by another instructor
            ValidationException: A booking is not part of this class
        """
        instructor = self.get_instructor_for_user(user_id)
        scheduled_class = self.class_repository.get_by_id(class_id)
        if scheduled_class is None:
            raise NotFoundException(f"Class {class_id} not found")
        if scheduled_class.instructor_id != instructor.id:
            raise ForbiddenException("You can only take attendance for your own classes")

        requested = list(dict.fromkeys(data.booking_ids))
        class_booking_ids = {booking.id for booking in scheduled_class.bookings}
        foreign = [booking_id for booking_id in requested if booking_id not in class_booking_ids]
        if foreign:
            raise ValidationException(
                "Some bookings do not belong to this class",
                code="BOOKING_NOT_IN_CLASS",
                details={"booking_ids": foreign},
            )

        already = self.attendance_repository.recorded_booking_ids(class_id, requested)
        to_record = [booking_id for booking_id in requested if booking_id not in already]

        with self.transaction():
            for booking_id in to_record:
                self.attendance_repository.create(
                    class_id=class_id, booking_id=booking_id, attended=data.attended
                )

        self.log_operation(
            "record_attendance", class_id=class_id, recorded=len(to_record), skipped=len(already)
        )
        return AttendanceRecordResponse(
            class_id=class_id,
            recorded=to_record,
            already_recorded=[booking_id for booking_id in requested if booking_id in already],
        )

    @staticmethod
    def _class_entry(scheduled_class: ScheduledClass) -> PortalClassEntry:
        return PortalClassEntry(
            id=scheduled_class.id,
            name=scheduled_class.name,
            code=scheduled_class.code,
            venue=scheduled_class.venue,
            day_of_week=scheduled_class.day_of_week,
            start_time=scheduled_class.start_time,
            end_time=scheduled_class.end_time,
            term=scheduled_class.term,
            class_capacity=scheduled_class.class_capacity,
            bookings=[
                PortalBookingEntry(
                    id=booking.id,
                    customer_id=booking.customer_id,
                    customer_name=booking.customer_name,
                    booking_date=booking.booking_date,
                    is_free_trial=booking.is_free_trial,
                    has_attendance=booking.has_attendance,
                )
                for booking in scheduled_class.bookings
            ],
        )
