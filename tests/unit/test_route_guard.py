from datetime import datetime, timedelta, timezone

import jwt
import pytest

from classbook.auth import create_access_token
from classbook.core.config import Settings
from classbook.middleware.route_guard import (
    Allow,
    Redirect,
    SessionUser,
    authorize_navigation,
    is_excluded,
    login_redirect,
    resolve_session,
)

USER = SessionUser(id="user_1", email="someone@example.com")


def _roles(role):
    return lambda user_id: role


def _exploding_lookup(user_id):
    raise RuntimeError("database unavailable")


def _unexpected_lookup(user_id):
    raise AssertionError("role lookup should not run")


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key="guard-test-secret", access_token_expire_minutes=60, _env_file=None)


@pytest.mark.parametrize(
    "path", ["/static/app.js", "/favicon.ico", "/api/stripe/webhook", "/auth/callback", "/health"]
)
def test_excluded_paths_are_not_evaluated(path):
    assert is_excluded(path)
    assert authorize_navigation(path, None, _unexpected_lookup) == Allow()


def test_prefix_match_respects_segment_boundaries():
    assert not is_excluded("/apiary")
    assert authorize_navigation("/dashboardx", None, _unexpected_lookup) == Allow()


@pytest.mark.parametrize("path", ["/auth", "/signup"])
def test_authenticated_user_is_sent_home_from_auth_pages(path):
    decision = authorize_navigation(path, USER, _unexpected_lookup)
    assert isinstance(decision, Redirect)
    assert decision.location == "/"


@pytest.mark.parametrize("path", ["/auth", "/signup", "/", "/classes"])
def test_anonymous_user_may_browse_public_pages(path):
    assert authorize_navigation(path, None, _unexpected_lookup) == Allow()


@pytest.mark.parametrize(
    "path", ["/dashboard", "/dashboard/classes", "/my-portal", "/instructor-portal/classes"]
)
def test_anonymous_user_is_sent_to_login(path):
    decision = authorize_navigation(path, None, _unexpected_lookup)
    assert decision == Redirect(f"/auth?redirect_to={path}", "anonymous")


def test_login_redirect_keeps_the_original_path():
    assert login_redirect("/dashboard/classes") == "/auth?redirect_to=/dashboard/classes"


@pytest.mark.parametrize(
    "lookup, reason",
    [
        (_roles("customer"), "not_admin"),
        (_roles("instructor"), "not_admin"),
        (_roles(None), "missing_profile"),
        (_exploding_lookup, "role_lookup_failed"),
    ],
)
def test_non_admins_are_kept_out_of_the_dashboard(lookup, reason):
    decision = authorize_navigation("/dashboard/classes", USER, lookup)
    assert decision == Redirect("/auth?redirect_to=/dashboard/classes", reason)


def test_admin_reaches_the_dashboard():
    assert authorize_navigation("/dashboard/classes", USER, _roles("admin")) == Allow()


def test_authenticated_user_reaches_portals_without_role_lookup():
    assert authorize_navigation("/my-portal", USER, _unexpected_lookup) == Allow()
    assert authorize_navigation("/instructor-portal", USER, _unexpected_lookup) == Allow()


def test_resolve_session_rejects_missing_and_invalid_tokens(settings):
    assert resolve_session(None, settings) is None
    assert resolve_session("not-a-jwt", settings) is None


def test_resolve_session_rejects_expired_token(settings):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "user_1", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
        "guard-test-secret",
        algorithm="HS256",
    )
    assert resolve_session(token, settings) is None


def test_fresh_session_is_not_refreshed(settings):
    token = create_access_token({"sub": "user_1", "email": "a@example.com"}, settings)
    session = resolve_session(token, settings)

    assert session is not None
    assert session.user == SessionUser(id="user_1", email="a@example.com")
    assert session.refreshed_token is None


def test_session_past_half_life_is_refreshed(settings):
    token = create_access_token({"sub": "user_1", "email": "a@example.com"}, settings)
    later = datetime.now(timezone.utc) + timedelta(minutes=45)

    session = resolve_session(token, settings, now=later)

    assert session is not None
    assert session.refreshed_token is not None
    claims = jwt.decode(session.refreshed_token, "guard-test-secret", algorithms=["HS256"])
    assert claims["sub"] == "user_1"
