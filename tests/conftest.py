"""Test fixtures for rlh-tokens tests.

All tests are pure in-memory — they build configs with HMAC secrets, issue
tokens through the service, and craft odd tokens manually with PyJWT.
"""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from rlh_tokens import CategoryConfig, TokenConfig, TokenService

TEST_KEY = "test-signing-key-3h32SlghVhd284hfs-0123456789"
TEST_JWT_KEY = "test-jwt-category-key-Zq81LmnV0pX72aRt-987654"
TEST_ISSUER = "TestIssuer"
TEST_AUDIENCE = "TestAudience"


class FrozenClock:
    """Settable clock for deterministic expiry tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def config():
    return TokenConfig(
        signing_key=TEST_KEY,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
    )


@pytest.fixture
def service(config):
    return TokenService(config)


@pytest.fixture
def category_config():
    """Category-based config: JWT tokens get their own key and duration."""
    return TokenConfig(
        signing_key=TEST_KEY,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        default_duration=timedelta(hours=24),
        categories={
            "JWT": CategoryConfig(key=TEST_JWT_KEY, duration=timedelta(minutes=15)),
        },
    )


@pytest.fixture
def clock():
    return FrozenClock()


def create_test_token(
    key: str = TEST_KEY,
    *,
    issuer: str | None = TEST_ISSUER,
    audience: str | list[str] | None = TEST_AUDIENCE,
    expires_in: int | None = 900,
    algorithm: str = "HS256",
    **claims,
) -> str:
    """Create a JWT by hand, bypassing the service."""
    payload: dict = dict(claims)
    if issuer is not None:
        payload["iss"] = issuer
    if audience is not None:
        payload["aud"] = audience
    if expires_in is not None:
        payload["exp"] = datetime.now(UTC) + timedelta(seconds=expires_in)
    return jwt.encode(payload, key, algorithm=algorithm)
