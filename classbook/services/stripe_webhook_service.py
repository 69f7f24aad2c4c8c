# classbook/services/stripe_webhook_service.py
"""
Exactly-once processing of Stripe webhook deliveries.

Each verified event goes through the webhook ledger:

1. log the delivery (a redelivery finds its existing row)
2. short-circuit if the row is already ``processed``
3. claim the row (``received``/``failed``, or a ``processing`` row whose claim
   has expired, -> ``processing``); losing the claim means another delivery
   of the same event is in flight
4. reconcile and mark the row ``processed`` in one transaction; on any error
   roll back and mark the row ``failed`` so the next redelivery retries it
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import time
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from classbook.core.enums import WebhookStatus
from classbook.core.exceptions import RepositoryException, ServiceException
from classbook.services.base import BaseService
from classbook.services.payment_gateway import GatewayEvent
from classbook.services.reconciliation import ReconciliationResult, ReconciliationService
from classbook.services.webhook_ledger_service import WebhookLedgerService

STRIPE_SOURCE = "stripe"


class WebhookOutcome(str, Enum):
    PROCESSED = "processed"
    DUPLICATE = "duplicate"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


@dataclass
class WebhookProcessingResult:
    outcome: WebhookOutcome
    ledger_id: str
    result: Optional[ReconciliationResult] = None
    error: Optional[str] = None


class StripeWebhookService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.ledger = WebhookLedgerService(db)
        self.reconciliation = ReconciliationService(db)

    @BaseService.measure_operation("process_event")
    def process_event(
        self,
        event: GatewayEvent,
        headers: Mapping[str, Any] | None = None,
    ) -> WebhookProcessingResult:
        start = time.monotonic()

        with self.transaction():
            entry = self.ledger.log_received(
                source=STRIPE_SOURCE,
                event_type=event.type,
                payload=event.payload,
                event_id=event.id,
                headers=headers,
            )
        ledger_id = entry.id

        if entry.status == WebhookStatus.PROCESSED.value:
            self.logger.info("Stripe event %s already processed; acknowledging", event.id)
            return WebhookProcessingResult(WebhookOutcome.DUPLICATE, ledger_id)

        with self.transaction():
            claimed = self.ledger.mark_processing(entry)
        if not claimed:
            self.db.refresh(entry)
            if entry.status == WebhookStatus.PROCESSED.value:
                return WebhookProcessingResult(WebhookOutcome.DUPLICATE, ledger_id)
            self.logger.info("Stripe event %s is being processed by another delivery", event.id)
            return WebhookProcessingResult(WebhookOutcome.IN_PROGRESS, ledger_id)

        try:
            with self.transaction():
                result = self.reconciliation.apply(event)
                self.ledger.mark_processed(
                    entry,
                    related_entity_type="enrollment" if result.enrollment_id else None,
                    related_entity_id=result.enrollment_id,
                    duration_ms=self.ledger.elapsed_ms(start),
                )
        except Exception as exc:
            error = getattr(exc, "message", None) or str(exc) or type(exc).__name__
            self.logger.error(
                "Stripe event %s (%s) failed: %s", event.id, event.type, error, exc_info=True
            )
            self._record_failure(ledger_id, error, start)
            return WebhookProcessingResult(WebhookOutcome.FAILED, ledger_id, error=error)

        return WebhookProcessingResult(WebhookOutcome.PROCESSED, ledger_id, result=result)

    def _record_failure(self, ledger_id: str, error: str, start: float) -> None:
        """
        Mark the ledger row ``failed``.

        If that write fails too the row stays ``processing`` and is picked up
        again once its claim expires, so the delivery still reports failure.
        """
        try:
            with self.transaction():
                failed_entry = self.ledger.get_event(ledger_id)
                if failed_entry is not None:
                    self.ledger.mark_failed(
                        failed_entry, error=error, duration_ms=self.ledger.elapsed_ms(start)
                    )
        except (ServiceException, RepositoryException) as exc:
            self.logger.error("Could not mark webhook %s as failed: %s", ledger_id, exc)
