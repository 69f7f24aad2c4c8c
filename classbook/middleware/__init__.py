# classbook/middleware/__init__.py
from classbook.middleware.cors import WebhookAwareCORSMiddleware
from classbook.middleware.route_guard import RouteGuardMiddleware, authorize_navigation

__all__ = ["RouteGuardMiddleware", "WebhookAwareCORSMiddleware", "authorize_navigation"]
