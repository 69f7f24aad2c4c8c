# classbook/routes/dashboard/webhooks.py
"""Read-only view of the webhook ledger for staff."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from classbook.api.dependencies import get_webhook_ledger_service, require_admin
from classbook.core.enums import WebhookStatus
from classbook.core.exceptions import NotFoundException
from classbook.schemas.webhook import (
    WebhookEventDetailResponse,
    WebhookEventListResponse,
    WebhookEventResponse,
)
from classbook.services.webhook_ledger_service import WebhookLedgerService

router = APIRouter(
    prefix="/webhooks", tags=["dashboard-webhooks"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=WebhookEventListResponse)
def list_webhook_events(
    event_status: Optional[WebhookStatus] = Query(None, alias="status"),
    event_type: Optional[str] = Query(None),
    source: Optional[str] = Query(None),
    since_hours: Optional[int] = Query(None, ge=1, le=24 * 90),
    limit: int = Query(50, ge=1, le=500),
    service: WebhookLedgerService = Depends(get_webhook_ledger_service),
) -> WebhookEventListResponse:
    events = service.list_events(
        source=source,
        status=event_status.value if event_status else None,
        event_type=event_type,
        since_hours=since_hours,
        limit=limit,
    )
    return WebhookEventListResponse(
        events=[WebhookEventResponse.model_validate(event) for event in events],
        summary=service.summarize_by_status(since_hours=since_hours),
    )


@router.get("/{event_id}", response_model=WebhookEventDetailResponse)
def get_webhook_event(
    event_id: str, service: WebhookLedgerService = Depends(get_webhook_ledger_service)
) -> WebhookEventDetailResponse:
    event = service.get_event(event_id)
    if event is None:
        raise NotFoundException(f"Webhook event {event_id} not found")
    return WebhookEventDetailResponse.model_validate(event)
