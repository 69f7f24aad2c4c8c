# classbook/middleware/cors.py
"""CORS middleware that leaves server-to-server endpoints alone."""

from typing import Any, Iterable

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class WebhookAwareCORSMiddleware(CORSMiddleware):
    """
    Browser CORS for the dashboard; paths in ``exempt_paths`` answer their
    own preflights.

    The Stripe webhook replies to ``OPTIONS`` with a wildcard origin, which
    the credentialed dashboard policy would otherwise reject or rewrite.
    """

    def __init__(self, app: ASGIApp, *, exempt_paths: Iterable[str] = (), **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope.get("path", "") in self.exempt_paths:
            await self.app(scope, receive, send)
        else:
            await super().__call__(scope, receive, send)
