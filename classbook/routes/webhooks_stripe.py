# classbook/routes/webhooks_stripe.py
"""
Stripe webhook endpoint.

Mounted at /api/stripe/webhook. Replies use the ``{"received": true}`` /
``{"error": ...}`` bodies Stripe's dashboard shows, not problem+json.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from classbook.api.dependencies import get_db, get_payment_gateway
from classbook.core.exceptions import GatewayConfigurationError, SignatureVerificationFailed
from classbook.monitoring.prometheus_metrics import prometheus_metrics
from classbook.schemas.webhook import WebhookAckResponse, WebhookErrorResponse
from classbook.services.payment_gateway import PaymentGatewayClient
from classbook.services.stripe_webhook_service import StripeWebhookService, WebhookOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stripe", tags=["webhooks"])

WEBHOOK_PATH = "/api/stripe/webhook"

_PROCESSING_RETRY_AFTER_SECONDS = "2"
_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _error(message: str, status_code: int, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


@router.options("/webhook", status_code=status.HTTP_204_NO_CONTENT)
async def stripe_webhook_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=_CORS_HEADERS)


@router.post(
    "/webhook",
    response_model=WebhookAckResponse,
    responses={
        400: {"model": WebhookErrorResponse},
        500: {"model": WebhookErrorResponse},
        503: {"model": WebhookErrorResponse},
    },
)
async def handle_stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_payment_gateway),
) -> Response:
    """Verify, record and reconcile one Stripe event."""
    raw_body = await request.body()

    try:
        event = gateway.verify_event(raw_body, request.headers.get("stripe-signature"))
    except SignatureVerificationFailed as exc:
        prometheus_metrics.record_webhook_outcome("unverified", "rejected")
        return _error(exc.message, status.HTTP_400_BAD_REQUEST)
    except GatewayConfigurationError as exc:
        logger.error("Stripe webhook received but %s", exc.message)
        prometheus_metrics.record_webhook_outcome("unverified", "misconfigured")
        return _error(exc.message, status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info("Stripe event received", extra={"event_id": event.id, "event_type": event.type})

    service = StripeWebhookService(db)
    outcome = await asyncio.to_thread(service.process_event, event, dict(request.headers))
    prometheus_metrics.record_webhook_outcome(event.type, outcome.outcome.value)

    if outcome.outcome is WebhookOutcome.IN_PROGRESS:
        return _error(
            "processing_in_progress",
            status.HTTP_503_SERVICE_UNAVAILABLE,
            headers={"Retry-After": _PROCESSING_RETRY_AFTER_SECONDS},
        )
    if outcome.outcome is WebhookOutcome.FAILED:
        return _error(outcome.error or "processing_failed", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return JSONResponse(WebhookAckResponse().model_dump(), status_code=status.HTTP_200_OK)
