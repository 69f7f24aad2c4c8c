"""Pydantic models for the Stripe webhook endpoint and the ledger views."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from classbook.schemas.base import StandardizedModel


class WebhookAckResponse(StandardizedModel):
    """Acknowledgement payload Stripe expects on success."""

    received: bool = True


class WebhookErrorResponse(StandardizedModel):
    error: str


class WebhookEventResponse(StandardizedModel):
    id: str
    source: str
    event_type: str
    event_id: Optional[str] = None
    status: str
    processing_error: Optional[str] = None
    processing_duration_ms: Optional[int] = None
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    retry_count: int = 0
    received_at: datetime
    processed_at: Optional[datetime] = None


class WebhookEventDetailResponse(WebhookEventResponse):
    payload: Dict[str, Any] = Field(default_factory=dict)
    headers: Optional[Dict[str, Any]] = None
    last_retry_at: Optional[datetime] = None
    claimed_at: Optional[datetime] = None


class WebhookEventListResponse(StandardizedModel):
    events: List[WebhookEventResponse]
    summary: Dict[str, int] = Field(default_factory=dict)
