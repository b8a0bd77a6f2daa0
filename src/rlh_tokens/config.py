"""Token configuration — frozen dataclasses for signing keys, durations and validation policy."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType

from rlh_tokens.errors import TokenConfigError

JWT_ALGORITHM = "HS256"
DEFAULT_TYPE_CLAIM = "RLH_TOKEN_CLAIM"


@dataclass(frozen=True, slots=True)
class CategoryConfig:
    """Per-type overrides. Unset fields fall back to the shared TokenConfig values."""

    key: str | None = None
    duration: timedelta | None = None


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """Settings shared by every issue/validate call of a TokenService.

    Treat an instance as frozen once a service has been built from it.

    Example:
        TokenConfig(signing_key="...", issuer="my-app", audience="my-app")
        TokenConfig(
            signing_key="general-secret",
            default_duration=timedelta(hours=24),
            categories={"JWT": CategoryConfig(key="jwt-secret", duration=timedelta(minutes=15))},
        )
    """

    signing_key: str
    issuer: str | None = None
    audience: str | None = None
    validate_audience: bool = True
    validate_issuer: bool = True
    validate_expiry: bool = True
    validate_signature: bool = True
    default_duration: timedelta | None = None
    categories: Mapping[str, CategoryConfig] = field(default_factory=dict)
    type_claim: str = DEFAULT_TYPE_CLAIM
    leeway: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        """Validate keys and freeze the category table at construction time."""
        from rlh_tokens.core.types import normalize_token_type

        if not self.signing_key:
            raise TokenConfigError("signing_key must be a non-empty string")
        if not self.type_claim:
            raise TokenConfigError("type_claim must be a non-empty string")
        if self.leeway < timedelta(0):
            raise TokenConfigError("leeway must not be negative")

        categories: dict[str, CategoryConfig] = {}
        for label, category in self.categories.items():
            if category.key is not None and not category.key:
                raise TokenConfigError(f"Category '{label}' has an empty signing key")
            categories[normalize_token_type(label)] = category
        object.__setattr__(self, "categories", MappingProxyType(categories))

    def key_for(self, normalized_type: str) -> str:
        """Signing key for a normalized type: its category key, else the shared key."""
        category = self.categories.get(normalized_type)
        if category is not None and category.key:
            return category.key
        return self.signing_key

    def duration_for(self, normalized_type: str) -> timedelta | None:
        """Configured lifetime for a normalized type, if any."""
        category = self.categories.get(normalized_type)
        if category is not None and category.duration is not None:
            return category.duration
        return self.default_duration
