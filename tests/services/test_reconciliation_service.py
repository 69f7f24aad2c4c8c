from datetime import date
from decimal import Decimal
import re

import pytest

from classbook.core.exceptions import NotFoundException
from classbook.models import Booking, Enrollment, Payment
from classbook.services.payment_gateway import GatewayEvent
from classbook.services.reconciliation import ReconciliationService
from tests.helpers import payment_intent, stripe_event


def _succeeded(enrollment_id: str, class_ids: list[str], **metadata) -> GatewayEvent:
    return GatewayEvent.from_payload(
        stripe_event(
            "payment_intent.succeeded",
            payment_intent(
                "pi_rec_1",
                amount=36000,
                metadata={
                    "enrollmentId": enrollment_id,
                    "classIds": ",".join(class_ids),
                    **metadata,
                },
            ),
        )
    )


def test_succeeded_creates_one_booking_per_class_and_one_payment(db, make_class, make_enrollment):
    classes = [make_class(), make_class(), make_class()]
    enrollment = make_enrollment()
    event = _succeeded(enrollment.id, [c.id for c in classes], startDate="2026-02-02")

    result = ReconciliationService(db).reconcile(event)

    db.expire_all()
    bookings = db.query(Booking).filter(Booking.enrollment_id == enrollment.id).all()
    payments = db.query(Payment).filter(Payment.enrollment_id == enrollment.id).all()
    refreshed = db.get(Enrollment, enrollment.id)

    assert result.bookings_created == 3
    assert {b.class_id for b in bookings} == {c.id for c in classes}
    assert all(b.booking_date == date(2026, 2, 2) for b in bookings)
    assert all(b.term == "Term1" and not b.is_free_trial for b in bookings)
    assert len(payments) == 1
    assert payments[0].amount == Decimal("360.00")
    assert payments[0].payment_method == "stripe"
    assert payments[0].transaction_id == "pi_rec_1"
    assert payments[0].booking_id is None
    assert re.fullmatch(r"RCP-\d{8}-000001", payments[0].receipt_number)
    assert refreshed.payment_status == "paid"
    assert refreshed.status == "active"
    assert refreshed.payment_intent == "pi_rec_1"


def test_unknown_class_is_skipped(db, make_class, make_enrollment):
    known = [make_class(), make_class()]
    enrollment = make_enrollment()
    event = _succeeded(enrollment.id, [known[0].id, "missing-class", known[1].id])

    result = ReconciliationService(db).reconcile(event)

    assert result.bookings_created == 2
    assert result.classes_skipped == ["missing-class"]
    assert db.query(Booking).count() == 2
    assert db.query(Payment).count() == 1


def test_booking_date_defaults_to_next_class_day(db, make_class, make_enrollment):
    wednesday_class = make_class(day_of_week=3)
    enrollment = make_enrollment()
    payload = stripe_event(
        "payment_intent.succeeded",
        payment_intent(metadata={"enrollmentId": enrollment.id, "classIds": wednesday_class.id}),
        created=1792368000,  # 2026-10-19 (a Monday) 00:00 UTC
    )

    ReconciliationService(db).reconcile(GatewayEvent.from_payload(payload))

    booking = db.query(Booking).one()
    assert booking.booking_date == date(2026, 10, 21)


def test_trial_enrollment_creates_free_trial_bookings(db, make_class, make_enrollment):
    scheduled_class = make_class()
    enrollment = make_enrollment(enrollment_type="trial")

    ReconciliationService(db).reconcile(_succeeded(enrollment.id, [scheduled_class.id]))

    assert db.query(Booking).one().is_free_trial is True


def test_enrollment_is_found_by_payment_intent(db, make_class, make_enrollment):
    scheduled_class = make_class()
    enrollment = make_enrollment(payment_intent="pi_rec_1")
    event = GatewayEvent.from_payload(
        stripe_event(
            "payment_intent.succeeded",
            payment_intent("pi_rec_1", metadata={"classIds": scheduled_class.id}),
        )
    )

    result = ReconciliationService(db).reconcile(event)

    assert result.enrollment_id == enrollment.id
    assert result.bookings_created == 1


def test_succeeded_without_enrollment_fails(db):
    event = _succeeded("no-such-enrollment", [])

    with pytest.raises(NotFoundException):
        ReconciliationService(db).reconcile(event)

    assert db.query(Payment).count() == 0


@pytest.mark.parametrize(
    "event_type, payment_status, status",
    [
        ("payment_intent.payment_failed", "failed", "cancelled"),
        ("payment_intent.canceled", "cancelled", "cancelled"),
        ("charge.refunded", "refunded", "cancelled"),
        ("charge.dispute.created", "disputed", "active"),
    ],
)
def test_status_events_update_enrollment_only(
    db, make_enrollment, event_type, payment_status, status
):
    enrollment = make_enrollment()
    event = GatewayEvent.from_payload(
        stripe_event(event_type, payment_intent(metadata={"enrollmentId": enrollment.id}))
    )

    ReconciliationService(db).reconcile(event)

    db.expire_all()
    refreshed = db.get(Enrollment, enrollment.id)
    assert refreshed.payment_status == payment_status
    assert refreshed.status == status
    assert db.query(Booking).count() == 0
    assert db.query(Payment).count() == 0


def test_refund_finds_enrollment_through_charge_payment_intent(db, make_enrollment):
    enrollment = make_enrollment(payment_intent="pi_charged")
    charge = {"id": "ch_1", "object": "charge", "payment_intent": "pi_charged", "amount": 100}
    event = GatewayEvent.from_payload(stripe_event("charge.refunded", charge))

    ReconciliationService(db).reconcile(event)

    db.expire_all()
    assert db.get(Enrollment, enrollment.id).payment_status == "refunded"


def test_status_event_without_enrollment_is_acknowledged(db):
    event = GatewayEvent.from_payload(
        stripe_event("payment_intent.payment_failed", payment_intent(metadata={}))
    )

    result = ReconciliationService(db).reconcile(event)

    assert result.enrollment_found is False


@pytest.mark.parametrize(
    "event_type", ["payment_intent.created", "payment_intent.requires_action", "invoice.paid"]
)
def test_log_only_events_write_nothing(db, make_enrollment, event_type):
    enrollment = make_enrollment()
    event = GatewayEvent.from_payload(
        stripe_event(event_type, payment_intent(metadata={"enrollmentId": enrollment.id}))
    )

    ReconciliationService(db).reconcile(event)

    db.expire_all()
    assert db.get(Enrollment, enrollment.id).payment_status == "pending"
    assert db.query(Payment).count() == 0
