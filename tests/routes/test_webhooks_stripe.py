from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from pydantic import SecretStr

from classbook.core.exceptions import ServiceException
from classbook.models import Booking, Enrollment, Payment, WebhookEvent
from classbook.services.webhook_ledger_service import WebhookLedgerService
from tests.helpers import encode_event, payment_intent, sign_payload, stripe_event

WEBHOOK_URL = "/api/stripe/webhook"


def _post(client, event, *, signature=None):
    body = encode_event(event)
    headers = {"Content-Type": "application/json"}
    headers["Stripe-Signature"] = signature if signature is not None else sign_payload(body)
    return client.post(WEBHOOK_URL, content=body, headers=headers)


@pytest.fixture
def checkout(make_class, make_enrollment):
    classes = [make_class(), make_class(), make_class()]
    enrollment = make_enrollment(payment_intent="pi_route_1")
    event = stripe_event(
        "payment_intent.succeeded",
        payment_intent(
            "pi_route_1",
            amount=30000,
            metadata={"enrollmentId": enrollment.id, "classIds": ",".join(c.id for c in classes)},
        ),
        event_id="evt_route_1",
    )
    return event, enrollment, classes


def test_bad_signature_is_rejected_without_writes(client, db, checkout):
    event, enrollment, _ = checkout

    response = _post(client, event, signature="t=1,v1=deadbeef")

    assert response.status_code == 400
    assert response.json()["error"].startswith("Webhook signature verification failed: ")
    db.expire_all()
    assert db.query(WebhookEvent).count() == 0
    assert db.query(Booking).count() == 0
    assert db.get(Enrollment, enrollment.id).payment_status == "pending"


def test_missing_signature_is_rejected(client, checkout):
    event, _, _ = checkout
    body = encode_event(event)

    response = client.post(WEBHOOK_URL, content=body)

    assert response.status_code == 400
    assert "missing Stripe-Signature header" in response.json()["error"]


def test_succeeded_event_is_reconciled(client, db, checkout):
    event, enrollment, classes = checkout

    response = _post(client, event)

    assert response.status_code == 200
    assert response.json() == {"received": True}
    db.expire_all()
    assert db.get(Enrollment, enrollment.id).payment_status == "paid"
    assert db.query(Booking).filter(Booking.enrollment_id == enrollment.id).count() == len(classes)
    payment = db.query(Payment).one()
    assert float(payment.amount) == 300.0
    assert db.query(WebhookEvent).one().status == "processed"


def test_redelivery_does_not_duplicate_payment_or_bookings(client, db, checkout):
    event, _, classes = checkout

    first = _post(client, event)
    second = _post(client, event)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json() == {"received": True}
    assert db.query(Payment).count() == 1
    assert db.query(Booking).count() == len(classes)


def test_unknown_event_type_is_acknowledged(client, db):
    event = stripe_event(
        "customer.created", {"id": "cus_1", "object": "customer"}, event_id="evt_unknown"
    )

    response = _post(client, event)

    assert response.status_code == 200
    assert db.query(WebhookEvent).one().status == "processed"


def test_failed_payment_cancels_enrollment(client, db, make_enrollment):
    enrollment = make_enrollment(payment_intent="pi_fail")
    event = stripe_event(
        "payment_intent.payment_failed", payment_intent("pi_fail"), event_id="evt_fail"
    )

    response = _post(client, event)

    assert response.status_code == 200
    db.expire_all()
    refreshed = db.get(Enrollment, enrollment.id)
    assert (refreshed.payment_status, refreshed.status) == ("failed", "cancelled")


def test_downstream_failure_returns_500_and_records_it(client, db):
    event = stripe_event(
        "payment_intent.succeeded",
        payment_intent("pi_orphan", metadata={"enrollmentId": "does-not-exist"}),
        event_id="evt_orphan",
    )

    response = _post(client, event)

    assert response.status_code == 500
    assert "Enrollment not found" in response.json()["error"]
    ledger = db.query(WebhookEvent).one()
    assert ledger.status == "failed"
    assert ledger.processing_error
    assert db.query(Payment).count() == 0


def test_in_flight_duplicate_gets_503(client, db, checkout):
    event, _, _ = checkout
    db.add(
        WebhookEvent(
            source="stripe",
            event_type=event["type"],
            event_id=event["id"],
            payload=event,
            status="processing",
        )
    )
    db.commit()

    response = _post(client, event)

    assert response.status_code == 503
    assert response.json() == {"error": "processing_in_progress"}
    assert response.headers["Retry-After"] == "2"


def test_missing_webhook_secret_returns_500(app, client, checkout):
    event, _, _ = checkout
    app.state.settings = app.state.settings.model_copy(
        update={"stripe_webhook_secret": SecretStr("")}
    )

    response = _post(client, event)

    assert response.status_code == 500
    assert response.json() == {"error": "Stripe webhook secret is not configured"}


def test_preflight_returns_cors_headers(client):
    response = client.options(
        WEBHOOK_URL,
        headers={
            "Origin": "https://dashboard.stripe.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"


def test_webhook_is_not_behind_the_route_guard(client, checkout):
    event, _, _ = checkout
    with patch(
        "classbook.middleware.route_guard.authorize_navigation",
        side_effect=AssertionError("guard should not run"),
    ):
        response = _post(client, event)

    assert response.status_code == 200


def test_dashboard_preflight_keeps_the_credentialed_policy(client):
    response = client.options(
        "/dashboard/classes",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


def test_abandoned_processing_row_is_reclaimed(client, db, checkout):
    event, enrollment, _ = checkout
    db.add(
        WebhookEvent(
            source="stripe",
            event_type=event["type"],
            event_id=event["id"],
            payload=event,
            status="processing",
            received_at=datetime.now(timezone.utc) - timedelta(days=1),
        )
    )
    db.commit()

    response = _post(client, event)

    assert response.status_code == 200
    assert response.json() == {"received": True}
    db.expire_all()
    assert db.query(Payment).count() == 1
    assert db.get(Enrollment, enrollment.id).payment_status == "paid"
    assert db.query(WebhookEvent).one().status == "processed"


def test_failure_while_recording_failure_keeps_error_body(client, db):
    event = stripe_event(
        "payment_intent.succeeded",
        payment_intent("pi_orphan_2", metadata={"enrollmentId": "does-not-exist"}),
        event_id="evt_orphan_2",
    )
    with patch.object(
        WebhookLedgerService,
        "mark_failed",
        side_effect=ServiceException("Database operation failed: connection reset"),
    ):
        response = _post(client, event)

    assert response.status_code == 500
    assert "Enrollment not found" in response.json()["error"]
    assert db.query(WebhookEvent).one().status == "processing"
