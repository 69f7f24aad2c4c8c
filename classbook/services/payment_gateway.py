# classbook/services/payment_gateway.py
"""
Stripe gateway client.

Verifies the ``Stripe-Signature`` of inbound webhook deliveries and turns the
payload into an immutable ``GatewayEvent``. A client is built per request from
settings; nothing here touches the module-level ``stripe.api_key``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import json
import logging
from typing import Any, Mapping, Optional

import stripe

from classbook.core.config import Settings
from classbook.core.exceptions import GatewayConfigurationError, SignatureVerificationFailed

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


class GatewayEventKind(str, Enum):
    """Closed set of gateway event types the reconciliation handler understands."""

    PAYMENT_INTENT_CREATED = "payment_intent.created"
    PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
    PAYMENT_INTENT_PAYMENT_FAILED = "payment_intent.payment_failed"
    PAYMENT_INTENT_CANCELED = "payment_intent.canceled"
    PAYMENT_INTENT_REQUIRES_ACTION = "payment_intent.requires_action"
    CHARGE_REFUNDED = "charge.refunded"
    CHARGE_DISPUTE_CREATED = "charge.dispute.created"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, event_type: Optional[str]) -> "GatewayEventKind":
        try:
            return cls(event_type)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class GatewayEvent:
    """A verified gateway event."""

    id: str
    type: str
    kind: GatewayEventKind
    object: Mapping[str, Any]
    created: datetime
    livemode: bool = False
    payload: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GatewayEvent":
        """Build an event from a decoded webhook body; raises ValueError when malformed."""
        event_id = payload.get("id")
        event_type = payload.get("type")
        data = payload.get("data")
        if not isinstance(event_id, str) or not event_id:
            raise ValueError("event has no id")
        if not isinstance(event_type, str) or not event_type:
            raise ValueError("event has no type")
        if not isinstance(data, Mapping) or not isinstance(data.get("object"), Mapping):
            raise ValueError("event has no data.object")

        created_raw = payload.get("created")
        if isinstance(created_raw, (int, float)):
            created = datetime.fromtimestamp(created_raw, tz=timezone.utc)
        else:
            created = datetime.now(timezone.utc)

        return cls(
            id=event_id,
            type=event_type,
            kind=GatewayEventKind.from_type(event_type),
            object=data["object"],
            created=created,
            livemode=bool(payload.get("livemode", False)),
            payload=payload,
        )

    @property
    def metadata(self) -> dict[str, str]:
        raw = self.object.get("metadata") or {}
        if not isinstance(raw, Mapping):
            return {}
        return {str(key): "" if value is None else str(value) for key, value in raw.items()}

    @property
    def object_id(self) -> Optional[str]:
        value = self.object.get("id")
        return str(value) if value else None

    @property
    def amount_minor(self) -> Optional[int]:
        """Amount in the currency's minor unit, preferring what was actually received."""
        value = self.object.get("amount_received")
        if value is None:
            value = self.object.get("amount")
        if value is None:
            return None
        return int(value)

    @property
    def currency(self) -> Optional[str]:
        value = self.object.get("currency")
        return str(value).lower() if value else None

    @property
    def payment_intent_id(self) -> Optional[str]:
        """PaymentIntent the event concerns, whatever the object type."""
        if self.object.get("object") == "payment_intent" or self.type.startswith(
            "payment_intent."
        ):
            return self.object_id
        value = self.object.get("payment_intent")
        if isinstance(value, Mapping):
            value = value.get("id")
        return str(value) if value else None


class PaymentGatewayClient:
    """Thin wrapper around the Stripe SDK for webhook verification."""

    def __init__(
        self,
        secret_key: Optional[str],
        webhook_secret: Optional[str],
        *,
        tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    ) -> None:
        self._secret_key = secret_key or None
        self._webhook_secret = webhook_secret or None
        self._tolerance = tolerance

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentGatewayClient":
        return cls(
            secret_key=settings.stripe_secret_key.get_secret_value(),
            webhook_secret=settings.webhook_secret,
            tolerance=settings.stripe_webhook_tolerance_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return self._webhook_secret is not None

    def verify_event(self, payload: bytes, signature: Optional[str]) -> GatewayEvent:
        """
        Verify ``payload`` against its ``Stripe-Signature`` header and parse it.

        Raises:
            GatewayConfigurationError: no webhook secret is configured
            SignatureVerificationFailed: missing or invalid signature, or a body
                that is not a Stripe event
        """
        if not self._webhook_secret:
            raise GatewayConfigurationError()
        if not signature:
            raise SignatureVerificationFailed("missing Stripe-Signature header")

        try:
            decoded = json.loads(payload)
        except ValueError as exc:
            logger.warning("Stripe webhook body is not valid JSON: %s", exc)
            raise SignatureVerificationFailed(f"invalid payload: {exc}") from exc
        if not isinstance(decoded, Mapping):
            raise SignatureVerificationFailed("invalid payload: expected a JSON object")

        try:
            stripe.Webhook.construct_event(
                payload,
                signature,
                self._webhook_secret,
                tolerance=self._tolerance,
                api_key=self._secret_key,
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe signature verification failed: %s", exc)
            raise SignatureVerificationFailed(str(exc)) from exc

        try:
            return GatewayEvent.from_payload(decoded)
        except ValueError as exc:
            raise SignatureVerificationFailed(f"invalid payload: {exc}") from exc
