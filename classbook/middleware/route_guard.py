# classbook/middleware/route_guard.py
"""
Route guard.

``authorize_navigation`` decides, for one navigation, whether to let it
through or where to send the browser instead:

    authenticated user on /auth or /signup      -> redirect to /
    anonymous user on a protected area          -> redirect to /auth?redirect_to=<path>
    authenticated user in the admin area        -> allowed only if the user's role is admin
    anything else                               -> allow

``RouteGuardMiddleware`` resolves (and refreshes) the session cookie, calls
the decision function and turns a redirect decision into a 307.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Optional, Union
from urllib.parse import quote

import jwt
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from classbook.auth import create_access_token, decode_access_token
from classbook.core.config import Settings
from classbook.core.enums import RoleName
from classbook.monitoring.prometheus_metrics import prometheus_metrics
from classbook.repositories.user_repository import UserRepository
from classbook.utils.cookies import set_session_cookie

logger = logging.getLogger(__name__)

EXCLUDED_PREFIXES = ("/static", "/api", "/auth/callback", "/health")
EXCLUDED_PATHS = frozenset({"/favicon.ico"})
AUTH_PATHS = frozenset({"/auth", "/signup"})
PROTECTED_PREFIXES = ("/dashboard", "/my-portal", "/instructor-portal")
ADMIN_PREFIXES = ("/dashboard",)
LOGIN_PATH = "/auth"
HOME_PATH = "/"


@dataclass(frozen=True)
class SessionUser:
    id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Redirect:
    location: str
    reason: str = ""


GuardDecision = Union[Allow, Redirect]
RoleLookup = Callable[[str], Optional[str]]

ALLOW = Allow()


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def is_excluded(path: str) -> bool:
    """Paths the guard never evaluates: assets, API calls, the auth callback, health."""
    return path in EXCLUDED_PATHS or any(_under(path, prefix) for prefix in EXCLUDED_PREFIXES)


def login_redirect(path: str) -> str:
    return f"{LOGIN_PATH}?redirect_to={quote(path, safe='/')}"


def authorize_navigation(
    path: str,
    user: Optional[SessionUser],
    role_lookup: RoleLookup,
) -> GuardDecision:
    """Decide whether ``user`` may navigate to ``path``."""
    if is_excluded(path):
        return ALLOW

    if user is not None and path in AUTH_PATHS:
        return Redirect(HOME_PATH, "already_authenticated")

    if user is None:
        if any(_under(path, prefix) for prefix in PROTECTED_PREFIXES):
            return Redirect(login_redirect(path), "anonymous")
        return ALLOW

    if any(_under(path, prefix) for prefix in ADMIN_PREFIXES):
        try:
            role = role_lookup(user.id)
        except Exception as exc:
            logger.warning("Role lookup failed for user %s: %s", user.id, exc)
            return Redirect(login_redirect(path), "role_lookup_failed")
        if role is None:
            return Redirect(login_redirect(path), "missing_profile")
        if role != RoleName.ADMIN.value:
            return Redirect(login_redirect(path), "not_admin")

    return ALLOW


@dataclass(frozen=True)
class ResolvedSession:
    user: SessionUser
    refreshed_token: Optional[str] = None


def resolve_session(
    token: Optional[str],
    settings: Settings,
    *,
    now: Optional[datetime] = None,
) -> Optional[ResolvedSession]:
    """
    Decode the session cookie.

    Returns None for a missing, invalid or expired token. Once more than half
    of the token's lifetime has passed a fresh token is issued alongside.
    """
    if not token:
        return None
    try:
        claims: dict[str, Any] = decode_access_token(token, settings)
    except jwt.PyJWTError as exc:
        logger.debug("Ignoring invalid session token: %s", exc)
        return None

    user = SessionUser(id=str(claims["sub"]), email=claims.get("email"))
    issued_at = int(claims["iat"])
    expires_at = int(claims["exp"])
    current = int((now or datetime.now(timezone.utc)).timestamp())

    refreshed_token = None
    if current - issued_at > (expires_at - issued_at) / 2:
        refreshed_token = create_access_token({"sub": user.id, "email": user.email}, settings)
    return ResolvedSession(user=user, refreshed_token=refreshed_token)


def _sets_cookie(response: Response, name: str) -> bool:
    prefix = f"{name}="
    return any(
        value.startswith(prefix) for value in response.headers.getlist("set-cookie")
    )


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Runs ``authorize_navigation`` in front of every non-excluded request."""

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if is_excluded(path):
            return await call_next(request)

        session = resolve_session(
            request.cookies.get(self.settings.session_cookie_name), self.settings
        )
        user = session.user if session else None
        decision = await run_in_threadpool(
            authorize_navigation, path, user, self._role_lookup(request)
        )

        if isinstance(decision, Redirect):
            logger.info(
                "Route guard redirect",
                extra={"path": path, "location": decision.location, "reason": decision.reason},
            )
            prometheus_metrics.record_guard_redirect(decision.reason)
            response: Response = RedirectResponse(decision.location, status_code=307)
        else:
            request.state.user = user
            response = await call_next(request)

        if (
            session is not None
            and session.refreshed_token
            and not _sets_cookie(response, self.settings.session_cookie_name)
        ):
            set_session_cookie(response, self.settings, session.refreshed_token)
        return response

    @staticmethod
    def _role_lookup(request: Request) -> RoleLookup:
        def lookup(user_id: str) -> Optional[str]:
            db = request.app.state.session_factory()
            try:
                return UserRepository(db).get_role(user_id)
            finally:
                db.close()

        return lookup
