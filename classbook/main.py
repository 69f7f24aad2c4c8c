# classbook/main.py
"""
Application factory for the classbook API.

``create_app`` wires settings, the database engine, middleware, error
handlers and routers. Tests build their own app with injected settings;
``uvicorn classbook.main:app`` serves the module-level instance.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from classbook.core.config import Settings, settings as default_settings
from classbook.database import build_engine, build_session_factory
from classbook.errors import register_error_handlers
from classbook.middleware.cors import WebhookAwareCORSMiddleware
from classbook.middleware.route_guard import RouteGuardMiddleware
from classbook.routes import auth, health, instructor_portal, webhooks_stripe
from classbook.routes.dashboard import router as dashboard_router

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    app_settings: Settings = app.state.settings
    logger.info(f"classbook API starting up (environment: {app_settings.environment})")
    if not app_settings.webhook_secret:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set; Stripe webhooks will be rejected")
    yield
    logger.info("classbook API shutting down")
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title="classbook API",
        description="Class timetable, bookings, enrollments and Stripe payment reconciliation",
        version="0.1.0",
        lifespan=app_lifespan,
    )

    engine = build_engine(
        settings.database_url,
        echo=settings.database_echo,
        service_key=settings.database_service_key.get_secret_value() or None,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Last added runs first
    app.add_middleware(RouteGuardMiddleware, settings=settings)
    app.add_middleware(
        WebhookAwareCORSMiddleware,
        exempt_paths=[webhooks_stripe.WEBHOOK_PATH],
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )
    logger.info("CORS allow_origins=%s", settings.cors_origin_list)

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(webhooks_stripe.router)
    app.include_router(auth.router)
    app.include_router(dashboard_router)
    app.include_router(instructor_portal.router)
    return app


app = create_app()
