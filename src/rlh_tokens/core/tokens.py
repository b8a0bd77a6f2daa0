"""JWT creation and parsing — the only place that calls into PyJWT."""

import logging
from collections.abc import Iterable
from datetime import datetime

import jwt

from rlh_tokens.config import JWT_ALGORITHM
from rlh_tokens.core.claims import claims_to_payload
from rlh_tokens.core.schemas import Claim

logger = logging.getLogger("rlh_tokens.tokens")

REGISTERED_CLAIMS = frozenset({"iss", "aud", "exp", "iat", "nbf"})


def sign_token(
    *,
    issuer: str | None,
    audience: str | None,
    claims: Iterable[Claim],
    expires_at: datetime,
    key: str,
    issued_at: datetime | None = None,
) -> str:
    """Create a signed HS256 JWT.

    Args:
        issuer: Value for ``iss`` (omitted when None).
        audience: Value for ``aud`` (omitted when None).
        claims: Claims to embed. Repeated keys are stored as a JSON array.
        expires_at: Absolute UTC expiry instant for ``exp``.
        key: Shared HMAC secret.
        issued_at: Optional ``iat`` instant.

    Returns:
        Encoded JWT string.
    """
    payload: dict = claims_to_payload(claims)

    overridden = sorted(REGISTERED_CLAIMS.intersection(payload))
    if overridden:
        logger.warning("Ignoring caller-supplied registered claims: %s", ", ".join(overridden))
        for name in overridden:
            del payload[name]

    if issuer is not None:
        payload["iss"] = issuer
    if audience is not None:
        payload["aud"] = audience
    if issued_at is not None:
        payload["iat"] = issued_at
    payload["exp"] = expires_at

    return jwt.encode(payload, key, algorithm=JWT_ALGORITHM)


def read_token(value: str) -> tuple[dict, dict]:
    """Parse a compact JWT without verifying it.

    Returns:
        Tuple of (header, payload) dicts.

    Raises:
        jwt.InvalidTokenError: If the value is not a well-formed JWT with a JSON object payload.
    """
    header = jwt.get_unverified_header(value)
    payload = jwt.decode(value, options={"verify_signature": False})
    return header, payload


def verify_signature(value: str, key: str) -> None:
    """Check the token signature against key. Claims are not validated here.

    Raises:
        jwt.PyJWTError: If the signature or algorithm does not match.
    """
    jwt.PyJWS().decode(value, key, algorithms=[JWT_ALGORITHM])
