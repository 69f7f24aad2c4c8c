from datetime import date

from classbook.models import Booking
from classbook.repositories.attendance_repository import AttendanceRepository
from classbook.repositories.scheduled_class_repository import ScheduledClassRepository


def test_get_many_drops_unknown_ids(db, make_class):
    first, second = make_class(), make_class()
    repo = ScheduledClassRepository(db)

    found = repo.get_many([first.id, "missing", second.id, first.id])

    assert set(found) == {first.id, second.id}
    assert repo.get_many([]) == {}


def test_list_for_instructor(db, make_class, instructor):
    own = make_class()

    classes = ScheduledClassRepository(db).list_for_instructor(instructor.id)

    assert [c.id for c in classes] == [own.id]
    assert ScheduledClassRepository(db).list_for_instructor("nobody") == []


def test_recorded_booking_ids(db, make_class, customer):
    scheduled_class = make_class()
    bookings = [
        Booking(
            customer_id=customer.id,
            class_id=scheduled_class.id,
            booking_date=date(2026, 10, 21),
            term="Term1",
        )
        for _ in range(2)
    ]
    db.add_all(bookings)
    db.flush()
    repo = AttendanceRepository(db)
    repo.create(class_id=scheduled_class.id, booking_id=bookings[0].id)
    db.commit()

    recorded = repo.recorded_booking_ids(scheduled_class.id, [b.id for b in bookings])

    assert recorded == {bookings[0].id}
    assert repo.recorded_booking_ids(scheduled_class.id, []) == set()
