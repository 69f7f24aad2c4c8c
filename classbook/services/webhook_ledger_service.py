"""Service for logging inbound webhooks and tracking their processing state."""

from __future__ import annotations

from datetime import datetime, timezone
import time
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classbook.core.enums import WebhookStatus
from classbook.core.exceptions import RepositoryException
from classbook.models.webhook_event import WebhookEvent
from classbook.repositories.factory import RepositoryFactory
from classbook.services.base import BaseService

_SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "stripe-signature",
    "x-api-key",
}


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class WebhookLedgerService(BaseService):
    """Business logic for webhook ledger entries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.repository = RepositoryFactory.create_webhook_event_repository(db)

    @BaseService.measure_operation("webhook_ledger.log_received")
    def log_received(
        self,
        *,
        source: str,
        event_type: str,
        payload: Mapping[str, Any],
        event_id: str,
        headers: Mapping[str, Any] | None = None,
    ) -> WebhookEvent:
        """
        Log a received webhook before processing.

        A redelivery of a known event returns the existing row with its retry
        counter bumped instead of inserting a second one.
        """
        safe_headers = self._sanitize_headers(headers) if headers else None
        now = _now_utc()
        existing = self.repository.find_by_source_and_event_id(source, event_id)
        if existing:
            return self._record_retry(existing, safe_headers, now)

        try:
            return self.repository.create(
                source=source,
                event_type=event_type or "unknown",
                event_id=event_id,
                payload=dict(payload),
                headers=safe_headers,
                status=WebhookStatus.RECEIVED.value,
                received_at=now,
                retry_count=0,
            )
        except RepositoryException as exc:
            # Race-safe fallback: DB uniqueness won in another worker.
            if isinstance(exc.__cause__, IntegrityError):
                existing = self.repository.find_by_source_and_event_id(source, event_id)
                if existing is not None:
                    return self._record_retry(existing, safe_headers, now)
            raise

    def _record_retry(
        self,
        event: WebhookEvent,
        safe_headers: dict[str, Any] | None,
        now: datetime,
    ) -> WebhookEvent:
        event.retry_count = (event.retry_count or 0) + 1
        event.last_retry_at = now
        if safe_headers is not None:
            event.headers = safe_headers
        self.repository.flush()
        self.logger.info(
            "Webhook %s redelivered (retry %s, status %s)",
            event.event_id,
            event.retry_count,
            event.status,
        )
        return event

    @BaseService.measure_operation("webhook_ledger.mark_processing")
    def mark_processing(self, event: WebhookEvent) -> bool:
        """Claim an event for processing; stale claims are taken over."""
        claimed = self.repository.claim_for_processing(event.id)
        if claimed:
            event.status = WebhookStatus.PROCESSING.value
            event.claimed_at = _now_utc()
            event.processing_error = None
            event.processed_at = None
        return claimed

    @BaseService.measure_operation("webhook_ledger.mark_processed")
    def mark_processed(
        self,
        event: WebhookEvent,
        *,
        related_entity_type: str | None = None,
        related_entity_id: str | None = None,
        duration_ms: int | None = None,
    ) -> WebhookEvent:
        """Mark webhook as successfully processed."""
        event.status = WebhookStatus.PROCESSED.value
        event.processed_at = _now_utc()
        event.processing_error = None
        event.related_entity_type = related_entity_type
        event.related_entity_id = related_entity_id
        event.processing_duration_ms = duration_ms
        self.repository.flush()
        return event

    @BaseService.measure_operation("webhook_ledger.mark_failed")
    def mark_failed(
        self,
        event: WebhookEvent,
        *,
        error: str,
        duration_ms: int | None = None,
    ) -> WebhookEvent:
        """Mark webhook as failed."""
        event.status = WebhookStatus.FAILED.value
        event.processing_error = error
        event.processed_at = _now_utc()
        event.processing_duration_ms = duration_ms
        self.repository.flush()
        return event

    @BaseService.measure_operation("webhook_ledger.list_events")
    def list_events(
        self,
        *,
        source: str | None = None,
        status: str | None = None,
        event_type: str | None = None,
        since_hours: int | None = None,
        limit: int = 50,
    ) -> list[WebhookEvent]:
        """Return recent webhook events filtered by criteria."""
        return self.repository.list_events(
            source=source,
            status=status,
            event_type=event_type,
            since_hours=since_hours,
            limit=limit,
        )

    @BaseService.measure_operation("webhook_ledger.summarize_by_status")
    def summarize_by_status(self, *, since_hours: int | None = None) -> dict[str, int]:
        return self.repository.summarize_by_status(since_hours=since_hours)

    @BaseService.measure_operation("webhook_ledger.get_event")
    def get_event(self, ledger_id: str) -> WebhookEvent | None:
        return self.repository.get_event(ledger_id)

    def _sanitize_headers(self, headers: Mapping[str, Any]) -> dict[str, Any]:
        return {
            key: ("***" if key.lower() in _SENSITIVE_HEADERS else value)
            for key, value in headers.items()
        }

    def elapsed_ms(self, start: float) -> int:
        return int((time.monotonic() - start) * 1000)
