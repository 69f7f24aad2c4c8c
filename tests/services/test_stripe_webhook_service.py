from datetime import datetime, timedelta, timezone

import pytest

from classbook.core.exceptions import ServiceException
from classbook.models import Booking, Enrollment, Payment, WebhookEvent
from classbook.repositories.payment_repository import PaymentRepository
from classbook.services.payment_gateway import GatewayEvent
from classbook.services.stripe_webhook_service import StripeWebhookService, WebhookOutcome
from classbook.services.webhook_ledger_service import WebhookLedgerService
from tests.helpers import payment_intent, stripe_event


@pytest.fixture
def succeeded_event(make_class, make_enrollment):
    def _build(event_id: str = "evt_svc_1"):
        classes = [make_class(), make_class()]
        enrollment = make_enrollment()
        payload = stripe_event(
            "payment_intent.succeeded",
            payment_intent(
                metadata={
                    "enrollmentId": enrollment.id,
                    "classIds": ",".join(c.id for c in classes),
                }
            ),
            event_id=event_id,
        )
        return GatewayEvent.from_payload(payload), enrollment

    return _build


def test_first_delivery_is_processed(db, succeeded_event):
    event, enrollment = succeeded_event()

    outcome = StripeWebhookService(db).process_event(event, {"Stripe-Signature": "t=1,v1=x"})

    db.expire_all()
    ledger = db.get(WebhookEvent, outcome.ledger_id)
    assert outcome.outcome is WebhookOutcome.PROCESSED
    assert outcome.result.bookings_created == 2
    assert ledger.status == "processed"
    assert ledger.related_entity_id == enrollment.id
    assert ledger.headers["Stripe-Signature"] == "***"


def test_redelivery_is_acknowledged_without_new_writes(db, succeeded_event):
    event, _ = succeeded_event()
    service = StripeWebhookService(db)

    service.process_event(event)
    second = service.process_event(event)

    assert second.outcome is WebhookOutcome.DUPLICATE
    assert db.query(Payment).count() == 1
    assert db.query(Booking).count() == 2
    assert db.query(WebhookEvent).one().retry_count == 1


def test_failure_rolls_back_and_marks_ledger_failed(db, succeeded_event, monkeypatch):
    event, enrollment = succeeded_event()

    def _broken(self):
        raise RuntimeError("receipt sequence unavailable")

    monkeypatch.setattr(PaymentRepository, "generate_receipt_number", _broken)
    outcome = StripeWebhookService(db).process_event(event)

    db.expire_all()
    assert outcome.outcome is WebhookOutcome.FAILED
    assert outcome.error == "receipt sequence unavailable"
    assert db.query(Booking).count() == 0
    assert db.query(Payment).count() == 0
    assert db.get(Enrollment, enrollment.id).payment_status == "pending"
    ledger = db.get(WebhookEvent, outcome.ledger_id)
    assert ledger.status == "failed"
    assert ledger.processing_error == "receipt sequence unavailable"

    monkeypatch.undo()
    retried = StripeWebhookService(db).process_event(event)

    assert retried.outcome is WebhookOutcome.PROCESSED
    assert db.query(Payment).count() == 1
    assert db.query(Booking).count() == 2


def test_delivery_in_flight_elsewhere_is_not_processed(db, succeeded_event):
    event, _ = succeeded_event()
    db.add(
        WebhookEvent(
            source="stripe",
            event_type=event.type,
            event_id=event.id,
            payload=dict(event.payload),
            status="processing",
        )
    )
    db.commit()

    outcome = StripeWebhookService(db).process_event(event)

    assert outcome.outcome is WebhookOutcome.IN_PROGRESS
    assert db.query(Payment).count() == 0


def test_failure_that_cannot_be_recorded_still_reports_failed(
    db, succeeded_event, monkeypatch
):
    event, _ = succeeded_event()

    def _broken_receipt(self):
        raise RuntimeError("receipt sequence unavailable")

    def _broken_mark_failed(self, *args, **kwargs):
        raise ServiceException("Database operation failed: connection reset")

    monkeypatch.setattr(PaymentRepository, "generate_receipt_number", _broken_receipt)
    monkeypatch.setattr(WebhookLedgerService, "mark_failed", _broken_mark_failed)
    outcome = StripeWebhookService(db).process_event(event)

    db.expire_all()
    assert outcome.outcome is WebhookOutcome.FAILED
    assert outcome.error == "receipt sequence unavailable"
    assert db.get(WebhookEvent, outcome.ledger_id).status == "processing"
    assert db.query(Payment).count() == 0


def test_abandoned_claim_is_taken_over_by_redelivery(db, succeeded_event):
    event, enrollment = succeeded_event()
    db.add(
        WebhookEvent(
            source="stripe",
            event_type=event.type,
            event_id=event.id,
            payload=dict(event.payload),
            status="processing",
            claimed_at=datetime.now(timezone.utc) - timedelta(minutes=30),
        )
    )
    db.commit()

    outcome = StripeWebhookService(db).process_event(event)

    db.expire_all()
    assert outcome.outcome is WebhookOutcome.PROCESSED
    assert db.get(WebhookEvent, outcome.ledger_id).status == "processed"
    assert db.get(Enrollment, enrollment.id).payment_status == "paid"
    assert db.query(Payment).count() == 1
