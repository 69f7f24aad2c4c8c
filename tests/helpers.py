"""Builders for signed Stripe webhook deliveries."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any, Optional

WEBHOOK_SECRET = "whsec_test"


def sign_payload(
    payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None
) -> str:
    """Build a ``Stripe-Signature`` header the way Stripe signs deliveries."""
    ts = int(timestamp if timestamp is not None else time.time())
    signed = f"{ts}.".encode() + payload
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


def stripe_event(
    event_type: str,
    obj: dict[str, Any],
    *,
    event_id: str = "evt_test_1",
    created: Optional[int] = None,
) -> dict[str, Any]:
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": created if created is not None else int(time.time()),
        "livemode": False,
        "data": {"object": obj},
    }


def payment_intent(
    intent_id: str = "pi_test_1",
    *,
    amount: int = 24000,
    metadata: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    return {
        "id": intent_id,
        "object": "payment_intent",
        "amount": amount,
        "amount_received": amount,
        "currency": "aud",
        "metadata": metadata or {},
    }


def encode_event(event: dict[str, Any]) -> bytes:
    return json.dumps(event).encode()
