# classbook/routes/health.py
"""
Health check and Prometheus scrape endpoints.

Both are public and excluded from the route guard.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from classbook.api.dependencies import get_settings
from classbook.core.config import Settings
from classbook.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(request: Request, settings: Settings = Depends(get_settings)) -> dict:
    """
    Health check endpoint.

    Reports the environment and whether the database answers a trivial query.
    """
    database = "ok"
    try:
        with request.app.state.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning(f"Health check database probe failed: {exc}")
        database = "unavailable"
    return {
        "status": "healthy" if database == "ok" else "degraded",
        "service": "classbook-api",
        "environment": settings.environment,
        "database": database,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
