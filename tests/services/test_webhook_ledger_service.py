from datetime import datetime, timedelta, timezone

from classbook.models import WebhookEvent
from classbook.services.webhook_ledger_service import WebhookLedgerService


def test_log_received_creates_event_with_masked_headers(db):
    service = WebhookLedgerService(db)
    event = service.log_received(
        source="stripe",
        event_type="payment_intent.succeeded",
        payload={"id": "evt_1"},
        headers={"Stripe-Signature": "t=1,v1=abc", "User-Agent": "Stripe/1.0"},
        event_id="evt_1",
    )
    db.commit()

    assert event.status == "received"
    assert event.retry_count == 0
    assert event.headers["Stripe-Signature"] == "***"
    assert event.headers["User-Agent"] == "Stripe/1.0"
    assert db.query(WebhookEvent).filter(WebhookEvent.event_id == "evt_1").count() == 1


def test_redelivery_reuses_the_row(db):
    service = WebhookLedgerService(db)
    first = service.log_received(
        source="stripe", event_type="charge.refunded", payload={"id": "evt_2"}, event_id="evt_2"
    )
    db.commit()
    second = service.log_received(
        source="stripe", event_type="charge.refunded", payload={"id": "evt_2"}, event_id="evt_2"
    )
    db.commit()

    assert second.id == first.id
    assert second.retry_count == 1
    assert second.last_retry_at is not None
    assert db.query(WebhookEvent).count() == 1


def test_same_event_id_from_other_source_is_separate(db):
    service = WebhookLedgerService(db)
    stripe_row = service.log_received(
        source="stripe", event_type="x", payload={}, event_id="evt_3"
    )
    other_row = service.log_received(
        source="other", event_type="x", payload={}, event_id="evt_3"
    )
    db.commit()

    assert stripe_row.id != other_row.id


def test_claim_is_exclusive(db):
    service = WebhookLedgerService(db)
    event = service.log_received(source="stripe", event_type="x", payload={}, event_id="evt_4")
    db.commit()

    assert service.mark_processing(event) is True
    db.commit()
    assert service.mark_processing(event) is False


def test_failed_event_can_be_claimed_again(db):
    service = WebhookLedgerService(db)
    event = service.log_received(source="stripe", event_type="x", payload={}, event_id="evt_5")
    service.mark_processing(event)
    service.mark_failed(event, error="boom", duration_ms=5)
    db.commit()

    assert event.status == "failed"
    assert event.processing_error == "boom"
    assert service.mark_processing(event) is True


def test_processing_claim_expires_after_the_lease(db):
    service = WebhookLedgerService(db)
    event = service.log_received(source="stripe", event_type="x", payload={}, event_id="evt_9")
    assert service.mark_processing(event) is True
    db.commit()

    assert service.repository.claim_for_processing(event.id, lease=timedelta(minutes=5)) is False

    event.claimed_at = datetime.now(timezone.utc) - timedelta(minutes=6)
    db.commit()

    assert service.mark_processing(event) is True
    db.commit()
    db.expire_all()
    reclaimed = db.get(WebhookEvent, event.id)
    assert reclaimed.status == "processing"
    assert reclaimed.claimed_at is not None


def test_mark_processed_records_related_entity(db):
    service = WebhookLedgerService(db)
    event = service.log_received(source="stripe", event_type="x", payload={}, event_id="evt_6")
    service.mark_processed(
        event, related_entity_type="enrollment", related_entity_id="enr_1", duration_ms=12
    )
    db.commit()

    assert event.status == "processed"
    assert event.processed_at is not None
    assert event.related_entity_id == "enr_1"
    assert service.mark_processing(event) is False


def test_list_and_summarize(db):
    service = WebhookLedgerService(db)
    done = service.log_received(source="stripe", event_type="a", payload={}, event_id="evt_7")
    service.log_received(source="stripe", event_type="b", payload={}, event_id="evt_8")
    service.mark_processed(done)
    db.commit()

    assert [e.event_id for e in service.list_events(status="processed")] == ["evt_7"]
    assert {e.event_id for e in service.list_events(source="stripe")} == {"evt_7", "evt_8"}
    assert service.summarize_by_status() == {"processed": 1, "received": 1}
