"""Repository helpers for the webhook event ledger."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import cast

from sqlalchemy import and_, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classbook.core.enums import WebhookStatus
from classbook.core.exceptions import RepositoryException
from classbook.models.webhook_event import WebhookEvent
from classbook.repositories.base_repository import BaseRepository

_CLAIMABLE_STATUSES = (WebhookStatus.RECEIVED.value, WebhookStatus.FAILED.value)

# How long a delivery may hold a row before another delivery can take it over
PROCESSING_LEASE = timedelta(minutes=5)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class WebhookEventRepository(BaseRepository[WebhookEvent]):
    """Repository for webhook ledger queries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, WebhookEvent)

    @staticmethod
    def _cutoff(since_hours: int) -> datetime:
        return _now_utc() - timedelta(hours=since_hours)

    def list_events(
        self,
        *,
        source: str | None = None,
        status: str | None = None,
        event_type: str | None = None,
        since_hours: int | None = None,
        limit: int = 50,
    ) -> list[WebhookEvent]:
        """Return recent webhook events filtered by criteria, newest first."""
        query = self._build_query()
        if since_hours is not None:
            query = query.filter(WebhookEvent.received_at >= self._cutoff(since_hours))
        if source:
            query = query.filter(WebhookEvent.source == source)
        if status:
            query = query.filter(WebhookEvent.status == status)
        if event_type:
            query = query.filter(WebhookEvent.event_type == event_type)
        query = query.order_by(WebhookEvent.received_at.desc()).limit(limit)
        return self._execute_query(query)

    def summarize_by_status(self, *, since_hours: int | None = None) -> dict[str, int]:
        try:
            query = self.db.query(WebhookEvent.status, func.count(WebhookEvent.id))
            if since_hours is not None:
                query = query.filter(WebhookEvent.received_at >= self._cutoff(since_hours))
            rows = query.group_by(WebhookEvent.status).all()
        except SQLAlchemyError as exc:
            self.logger.error("Failed to summarize webhook status counts: %s", str(exc))
            raise RepositoryException("Failed to summarize webhook status counts") from exc
        typed_rows = cast(list[tuple[str | None, int]], rows)
        return {row[0] or "unknown": int(row[1] or 0) for row in typed_rows}

    def get_event(self, event_id: str) -> WebhookEvent | None:
        try:
            return cast(WebhookEvent | None, self.db.get(WebhookEvent, event_id))
        except SQLAlchemyError as exc:
            self.logger.error("Failed to load webhook event %s: %s", event_id, str(exc))
            raise RepositoryException("Failed to load webhook event") from exc

    def find_by_source_and_event_id(self, source: str, event_id: str) -> WebhookEvent | None:
        """Find webhook event by source and external event ID."""
        result = (
            self.db.query(WebhookEvent)
            .filter(WebhookEvent.source == source, WebhookEvent.event_id == event_id)
            .first()
        )
        return cast(WebhookEvent | None, result)

    def claim_for_processing(
        self, ledger_id: str, *, lease: timedelta = PROCESSING_LEASE
    ) -> bool:
        """
        Move a ledger row into ``processing`` if nobody else holds it.

        A ``processing`` row whose claim is older than ``lease`` counts as
        abandoned and can be taken over. The conditional UPDATE is the lock:
        of two concurrent deliveries only one sees a row count of 1.
        """
        now = _now_utc()
        claim_started = func.coalesce(WebhookEvent.claimed_at, WebhookEvent.received_at)
        try:
            result = self.db.execute(
                update(WebhookEvent)
                .where(
                    WebhookEvent.id == ledger_id,
                    or_(
                        WebhookEvent.status.in_(_CLAIMABLE_STATUSES),
                        and_(
                            WebhookEvent.status == WebhookStatus.PROCESSING.value,
                            claim_started < now - lease,
                        ),
                    ),
                )
                .values(
                    status=WebhookStatus.PROCESSING.value,
                    claimed_at=now,
                    processing_error=None,
                    processed_at=None,
                )
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as exc:
            self.logger.error("Failed to claim webhook event %s: %s", ledger_id, str(exc))
            raise RepositoryException("Failed to claim webhook event") from exc
        return bool(result.rowcount)
