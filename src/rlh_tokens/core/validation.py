"""Token validation — structural, policy and claim checks with error accumulation.

Only the parse gate short-circuits. Every other check runs and contributes
its own ValidationError so callers get the full picture in one Result.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import jwt

from rlh_tokens.config import TokenConfig
from rlh_tokens.core.claims import claims_from_payload
from rlh_tokens.core.schemas import Claim, Result, ValidationError
from rlh_tokens.core.tokens import read_token, verify_signature

logger = logging.getLogger("rlh_tokens.validation")


def validate_token(
    token_value: str,
    expected_claims: Iterable[Claim],
    config: TokenConfig,
    *,
    key: str,
    now: datetime,
) -> Result:
    """Validate a token string against the configured policy and expected claims.

    Args:
        token_value: The encoded JWT.
        expected_claims: Claims that must be present with equal values (includes the type claim).
        config: Validation policy, issuer and audience.
        key: HMAC secret used to verify the signature.
        now: Current UTC time for the expiry check.

    Returns:
        Result.success() or Result.invalid_token(errors).
    """
    try:
        _, payload = read_token(token_value)
    except jwt.InvalidTokenError as e:
        logger.debug("Token could not be read: %s", e)
        return Result.invalid_token_field("token", "Provided token is unable to be read")

    errors: list[ValidationError] = []

    if config.validate_signature:
        _check_signature(token_value, key, errors)
    _check_policy(payload, config, now, errors)
    _check_claims(payload, expected_claims, errors)

    if errors:
        logger.debug(
            "Token validation failed: %s", ", ".join(e.field for e in errors),
        )
        return Result.invalid_token(errors)

    return Result.success()


def _check_signature(token_value: str, key: str, errors: list[ValidationError]) -> None:
    try:
        verify_signature(token_value, key)
    except jwt.PyJWTError as e:
        logger.debug("Signature check failed: %s", e)
        errors.append(ValidationError("Signature", "Token signature is invalid"))


def _first_audience(payload: Mapping[str, Any]) -> str | None:
    aud = payload.get("aud")
    if isinstance(aud, list):
        return aud[0] if aud else None
    return aud


def _expiry(payload: Mapping[str, Any]) -> float | None:
    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return None
    if not math.isfinite(exp):
        return None
    return float(exp)


def _check_policy(
    payload: Mapping[str, Any],
    config: TokenConfig,
    now: datetime,
    errors: list[ValidationError],
) -> None:
    """Audience, issuer and expiry checks. A disabled check is skipped entirely."""
    if config.validate_audience and _first_audience(payload) != config.audience:
        errors.append(ValidationError(
            "Audience",
            f"Configured audience '{config.audience}' does not match that provided by the token",
        ))

    if config.validate_issuer and payload.get("iss") != config.issuer:
        errors.append(ValidationError(
            "Issuer",
            f"Configured issuer '{config.issuer}' does not match that provided by the token",
        ))

    if config.validate_expiry:
        exp = _expiry(payload)
        if exp is None or exp + config.leeway.total_seconds() < now.timestamp():
            errors.append(ValidationError("ValidTo", "Token has expired"))


def _check_claims(
    payload: Mapping[str, Any],
    expected_claims: Iterable[Claim],
    errors: list[ValidationError],
) -> None:
    """Each expected claim must exist in the token with an equal value (first match by key)."""
    token_claims: dict[str, str] = {}
    for claim in claims_from_payload(payload):
        token_claims.setdefault(claim.key, claim.value)

    for expected in expected_claims:
        if token_claims.get(expected.key) != expected.value:
            errors.append(ValidationError(
                expected.key,
                f"Claim '{expected.key}/{expected.value}' is missing or invalid in provided token",
            ))
