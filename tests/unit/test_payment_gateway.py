import time
from unittest.mock import patch

import pytest
import stripe

from classbook.core.exceptions import GatewayConfigurationError, SignatureVerificationFailed
from classbook.services.payment_gateway import GatewayEventKind, PaymentGatewayClient
from tests.helpers import WEBHOOK_SECRET, encode_event, payment_intent, sign_payload, stripe_event


@pytest.fixture
def gateway() -> PaymentGatewayClient:
    return PaymentGatewayClient(secret_key="sk_test_123", webhook_secret=WEBHOOK_SECRET)


def test_verify_event_accepts_valid_signature(gateway):
    body = encode_event(
        stripe_event(
            "payment_intent.succeeded",
            payment_intent("pi_9", amount=1500, metadata={"enrollmentId": "enr_9"}),
            event_id="evt_9",
        )
    )

    event = gateway.verify_event(body, sign_payload(body))

    assert event.id == "evt_9"
    assert event.kind is GatewayEventKind.PAYMENT_INTENT_SUCCEEDED
    assert event.payment_intent_id == "pi_9"
    assert event.amount_minor == 1500
    assert event.currency == "aud"
    assert event.metadata == {"enrollmentId": "enr_9"}


def test_verify_event_rejects_wrong_secret(gateway):
    body = encode_event(stripe_event("payment_intent.created", payment_intent()))

    with pytest.raises(SignatureVerificationFailed) as exc_info:
        gateway.verify_event(body, sign_payload(body, secret="whsec_other"))

    assert exc_info.value.message.startswith("Webhook signature verification failed: ")


def test_verify_event_rejects_tampered_body(gateway):
    body = encode_event(stripe_event("payment_intent.created", payment_intent(amount=100)))
    header = sign_payload(body)
    tampered = body.replace(b"100", b"999")

    with pytest.raises(SignatureVerificationFailed):
        gateway.verify_event(tampered, header)


def test_verify_event_rejects_stale_timestamp(gateway):
    body = encode_event(stripe_event("payment_intent.created", payment_intent()))
    header = sign_payload(body, timestamp=int(time.time()) - 3600)

    with pytest.raises(SignatureVerificationFailed):
        gateway.verify_event(body, header)


def test_verify_event_requires_signature_header(gateway):
    body = encode_event(stripe_event("payment_intent.created", payment_intent()))

    with pytest.raises(SignatureVerificationFailed) as exc_info:
        gateway.verify_event(body, None)

    assert "missing Stripe-Signature header" in exc_info.value.message


def test_verify_event_rejects_non_object_body(gateway):
    body = b"[1, 2, 3]"
    with pytest.raises(SignatureVerificationFailed):
        gateway.verify_event(body, sign_payload(body))


def test_verify_event_rejects_signed_body_without_event_shape(gateway):
    body = b'{"hello": "world"}'
    with pytest.raises(SignatureVerificationFailed):
        gateway.verify_event(body, sign_payload(body))


def test_verify_event_without_secret_is_a_configuration_error():
    gateway = PaymentGatewayClient(secret_key=None, webhook_secret="")
    body = encode_event(stripe_event("payment_intent.created", payment_intent()))

    assert gateway.is_configured is False
    with pytest.raises(GatewayConfigurationError):
        gateway.verify_event(body, sign_payload(body))


def test_verify_event_delegates_to_stripe(gateway):
    body = encode_event(stripe_event("payment_intent.created", payment_intent()))

    with patch.object(stripe.Webhook, "construct_event") as construct_event:
        gateway.verify_event(body, "t=1,v1=abc")

    construct_event.assert_called_once()
    args, kwargs = construct_event.call_args
    assert args == (body, "t=1,v1=abc", WEBHOOK_SECRET)
    assert kwargs["tolerance"] == 300
