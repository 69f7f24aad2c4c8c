from datetime import datetime, timedelta, timezone

import jwt


def _token_issued(user, settings, *, minutes_ago):
    issued = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    claims = {
        "sub": user.id,
        "email": user.email,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


def test_anonymous_dashboard_visit_goes_to_login(client):
    response = client.get("/dashboard/classes", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/auth?redirect_to=/dashboard/classes"


def test_customer_is_kept_out_of_dashboard(login_as, customer_user):
    client = login_as(customer_user)

    response = client.get("/dashboard/classes", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/auth?redirect_to=/dashboard/classes"


def test_admin_reaches_dashboard(admin_client):
    response = admin_client.get("/dashboard/classes", follow_redirects=False)

    assert response.status_code == 200
    assert response.json() == []


def test_garbage_cookie_counts_as_anonymous(client, test_settings):
    client.cookies.set(test_settings.session_cookie_name, "not-a-jwt")

    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].startswith("/auth?redirect_to=")


def test_old_session_is_refreshed(client, admin_user, test_settings):
    old_token = _token_issued(
        admin_user, test_settings, minutes_ago=test_settings.access_token_expire_minutes * 3 // 4
    )
    client.cookies.set(test_settings.session_cookie_name, old_token)

    response = client.get("/dashboard/classes", follow_redirects=False)

    assert response.status_code == 200
    cookies = [
        value
        for value in response.headers.get_list("set-cookie")
        if value.startswith(f"{test_settings.session_cookie_name}=")
    ]
    assert len(cookies) == 1
    assert old_token not in cookies[0]


def test_fresh_session_is_left_alone(admin_client):
    response = admin_client.get("/dashboard/classes", follow_redirects=False)

    assert response.headers.get_list("set-cookie") == []


def test_public_pages_pass_through(client):
    assert client.get("/health").status_code == 200
    assert client.get("/auth").status_code == 200
