"""Cookie utilities for consistent session handling."""

from __future__ import annotations

from starlette.responses import Response

from classbook.core.config import Settings


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    """Write the session token cookie with the configured attributes."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        secure=bool(settings.session_cookie_secure),
        httponly=True,
        samesite=settings.session_cookie_samesite,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=bool(settings.session_cookie_secure),
        httponly=True,
        samesite=settings.session_cookie_samesite,
    )
