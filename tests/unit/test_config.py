from pydantic import ValidationError
import pytest

from classbook.core.config import Settings


def test_postgres_scheme_is_normalised():
    settings = Settings(
        database_url="postgres://user:pw@db.example.com:5432/classbook", _env_file=None
    )
    assert settings.database_url == "postgresql://user:pw@db.example.com:5432/classbook"


def test_webhook_secret_is_none_when_unset():
    assert Settings(stripe_webhook_secret="", _env_file=None).webhook_secret is None
    assert Settings(stripe_webhook_secret="whsec_x", _env_file=None).webhook_secret == "whsec_x"


def test_cors_origins_are_split():
    settings = Settings(
        cors_origins="https://a.example.com, https://b.example.com,", _env_file=None
    )
    assert settings.cors_origin_list == ["https://a.example.com", "https://b.example.com"]


def test_cookie_secure_accepts_strings():
    assert Settings(session_cookie_secure="yes", _env_file=None).session_cookie_secure is True
    assert Settings(session_cookie_secure="0", _env_file=None).session_cookie_secure is False


def test_production_refuses_the_development_secret():
    with pytest.raises(ValidationError):
        Settings(environment="production", _env_file=None)

    settings = Settings(environment="production", secret_key="real-secret", _env_file=None)
    assert settings.is_production


def test_session_max_age_follows_token_lifetime():
    assert Settings(access_token_expire_minutes=30, _env_file=None).session_max_age == 1800
