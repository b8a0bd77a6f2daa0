"""Claim collection helpers — coercion, type-claim injection and payload flattening."""

import json
from collections.abc import Iterable, Mapping
from typing import Any

from rlh_tokens.config import DEFAULT_TYPE_CLAIM
from rlh_tokens.core.schemas import Claim

ClaimsInput = Iterable[Claim] | Iterable[tuple[str, str]] | Mapping[str, str] | None


def coerce_claims(claims: ClaimsInput) -> list[Claim]:
    """Copy caller claims into a fresh list of Claim objects.

    Accepts Claim instances, (key, value) pairs or a mapping. The caller's
    collection is never mutated.
    """
    if claims is None:
        return []
    if isinstance(claims, Mapping):
        return [Claim(str(k), str(v)) for k, v in claims.items()]

    result: list[Claim] = []
    for item in claims:
        if isinstance(item, Claim):
            result.append(Claim(str(item.key), str(item.value)))
        else:
            key, value = item
            result.append(Claim(str(key), str(value)))
    return result


def build_claim_set(
    normalized_type: str,
    claims: ClaimsInput = None,
    *,
    type_claim: str = DEFAULT_TYPE_CLAIM,
) -> list[Claim]:
    """Ensure the token type claim is present exactly once, carrying normalized_type.

    Any caller-supplied claim under the reserved key is discarded. The order of
    the remaining claims is kept and the type claim is appended last.
    """
    result = [c for c in coerce_claims(claims) if c.key != type_claim]
    result.append(Claim(type_claim, normalized_type))
    return result


def claims_to_payload(claims: Iterable[Claim]) -> dict[str, str | list[str]]:
    """Group claims by key. Repeated keys become a JSON array in first-seen order."""
    payload: dict[str, str | list[str]] = {}
    for claim in claims:
        existing = payload.get(claim.key)
        if existing is None:
            payload[claim.key] = claim.value
        elif isinstance(existing, list):
            existing.append(claim.value)
        else:
            payload[claim.key] = [existing, claim.value]
    return payload


def _claim_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def claims_from_payload(payload: Mapping[str, Any]) -> list[Claim]:
    """Flatten a decoded JWT payload into claims. Arrays yield one claim per item."""
    result: list[Claim] = []
    for key, value in payload.items():
        if isinstance(value, list):
            result.extend(Claim(key, _claim_value(item)) for item in value)
        else:
            result.append(Claim(key, _claim_value(value)))
    return result
