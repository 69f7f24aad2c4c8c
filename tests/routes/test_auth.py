from datetime import timedelta

from classbook.auth import create_access_token
from tests.conftest import TEST_PASSWORD

COOKIE = "classbook_session"


def _session_cookie_header(response):
    cookies = response.headers.get_list("set-cookie")
    return next(value for value in cookies if value.startswith(f"{COOKIE}="))


def test_signup_creates_customer_and_signs_in(client):
    response = client.post(
        "/auth/signup",
        json={
            "email": "new.member@swimclub.com.au",
            "password": "long-enough-1",
            "full_name": "New Member",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "customer"
    assert body["email"] == "new.member@swimclub.com.au"
    header = _session_cookie_header(response).lower()
    assert "httponly" in header
    assert "samesite=lax" in header


def test_signup_with_taken_email_conflicts(client, make_user):
    make_user("customer", email="taken@swimclub.com.au")

    response = client.post(
        "/auth/signup", json={"email": "taken@swimclub.com.au", "password": "long-enough-1"}
    )

    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_TAKEN"


def test_signup_rejects_short_password(client):
    response = client.post(
        "/auth/signup", json={"email": "short@swimclub.com.au", "password": "short"}
    )

    assert response.status_code == 422


def test_login_sets_cookie_and_echoes_redirect(client, admin_user):
    response = client.post(
        "/auth/login",
        json={"email": admin_user.email, "password": TEST_PASSWORD, "redirect_to": "/dashboard"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["redirect_to"] == "/dashboard"
    assert body["user"]["role"] == "admin"
    assert _session_cookie_header(response)


def test_login_refuses_off_site_redirect(client, admin_user):
    response = client.post(
        "/auth/login",
        json={
            "email": admin_user.email,
            "password": TEST_PASSWORD,
            "redirect_to": "//evil.example.com",
        },
    )

    assert response.json()["redirect_to"] == "/"


def test_login_with_wrong_password(client, admin_user):
    response = client.post(
        "/auth/login", json={"email": admin_user.email, "password": "not-it"}
    )

    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"
    assert COOKIE not in response.cookies


def test_login_with_unknown_email(client):
    response = client.post(
        "/auth/login", json={"email": "ghost@swimclub.com.au", "password": TEST_PASSWORD}
    )

    assert response.status_code == 401


def test_inactive_user_cannot_login(client, make_user):
    user = make_user("customer", email="gone@swimclub.com.au", is_active=False)

    response = client.post("/auth/login", json={"email": user.email, "password": TEST_PASSWORD})

    assert response.status_code == 401


def test_logout_clears_cookie(admin_client):
    response = admin_client.post("/auth/logout")

    assert response.status_code == 204
    assert "max-age=0" in _session_cookie_header(response).lower()


def test_login_page_for_anonymous_user(client):
    response = client.get("/auth", params={"redirect_to": "/dashboard/classes"})

    assert response.status_code == 200
    assert response.json() == {
        "page": "login",
        "redirect_to": "/dashboard/classes",
        "submit_to": "/auth/login",
    }


def test_signed_in_user_is_sent_home_from_auth_pages(admin_client):
    for path in ("/auth", "/signup"):
        response = admin_client.get(path, follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "/"


def test_callback_stores_token_and_redirects(client, admin_user, test_settings):
    token = create_access_token({"sub": admin_user.id, "email": admin_user.email}, test_settings)

    response = client.get(
        "/auth/callback",
        params={"token": token, "redirect_to": "/dashboard"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert _session_cookie_header(response).startswith(f"{COOKIE}={token}")


def test_callback_with_expired_token_goes_back_to_login(client, admin_user, test_settings):
    token = create_access_token(
        {"sub": admin_user.id}, test_settings, expires_delta=timedelta(seconds=-5)
    )

    response = client.get("/auth/callback", params={"token": token}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/auth"
