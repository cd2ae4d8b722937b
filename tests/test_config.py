from datetime import timedelta

import pytest
from pydantic import ValidationError

from fraudlr.core.config import INSECURE_DEV_SECRET, Settings


def build(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_defaults():
    settings = build(ENVIRONMENT="development", JWT_SECRET=INSECURE_DEV_SECRET)
    assert settings.token_lifetime == timedelta(days=7)
    assert settings.BCRYPT_ROUNDS == 12
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.SESSION_COOKIE_NAME == "auth-token"
    assert not settings.is_production


def test_production_requires_real_secret():
    with pytest.raises(ValidationError):
        build(ENVIRONMENT="production", JWT_SECRET=INSECURE_DEV_SECRET)
    with pytest.raises(ValidationError):
        build(ENVIRONMENT="production", JWT_SECRET="")


def test_production_with_secret():
    settings = build(ENVIRONMENT="production", JWT_SECRET="a-long-random-production-secret")
    assert settings.is_production


def test_postgres_scheme_normalized():
    settings = build(DATABASE_URL="postgres://user:pw@db:5432/fraudlr")
    assert settings.DATABASE_URL == "postgresql://user:pw@db:5432/fraudlr"


def test_only_hmac_algorithms_allowed():
    with pytest.raises(ValidationError):
        build(JWT_ALGORITHM="RS256")
    assert build(JWT_ALGORITHM="HS512").JWT_ALGORITHM == "HS512"


def test_token_lifetime_must_be_positive():
    with pytest.raises(ValidationError):
        build(TOKEN_EXPIRE_DAYS=0)


def test_cors_origins_list():
    settings = build(CORS_ORIGINS="http://localhost:3000, https://app.fraudlr.com,")
    assert settings.cors_origins_list == ["http://localhost:3000", "https://app.fraudlr.com"]
