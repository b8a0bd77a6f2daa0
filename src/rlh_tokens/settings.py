"""Configuration-section binding — builds a TokenConfig from host configuration values.

Accepts both historical section shapes:

    # Flag based, one key for every type, duration passed per call
    {"JWTKey": "...", "Issuer": "...", "Audience": "...", "ValidateExpiry": true}

    # Category based, a JWT key/duration plus a general key/duration for everything else
    {"JWTKey": "...", "JWTDuration": "00:15:00", "GeneralKey": "...", "GeneralDuration": "1.00:00:00",
     "Issuer": "...", "Audience": "..."}
"""

import logging
import re
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rlh_tokens.config import DEFAULT_TYPE_CLAIM, CategoryConfig, TokenConfig
from rlh_tokens.core.types import TokenType, normalize_token_type
from rlh_tokens.errors import TokenConfigError

logger = logging.getLogger("rlh_tokens.settings")

# TimeSpan style "d.hh:mm:ss[.fffffff]", which pydantic does not parse on its own
_TIMESPAN_RE = re.compile(
    r"^(?P<sign>-)?(?P<days>\d+)\.(?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2}(?:\.\d+)?)$"
)


def _parse_timespan(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    match = _TIMESPAN_RE.match(value.strip())
    if match is None:
        return value
    delta = timedelta(
        days=int(match["days"]),
        hours=int(match["hours"]),
        minutes=int(match["minutes"]),
        seconds=float(match["seconds"]),
    )
    return -delta if match["sign"] else delta


class CategorySettings(BaseModel):
    """Per-type key/duration overrides inside the ``Categories`` table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_assignment=True)

    key: str | None = Field(default=None, alias="Key")
    duration: timedelta | None = Field(default=None, alias="Duration")

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration(cls, value: Any) -> Any:
        return _parse_timespan(value)


class TokenSettings(BaseModel):
    """Bindable form of TokenConfig. Fields accept their section key or their Python name."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_assignment=True)

    signing_key: str | None = Field(default=None, alias="SigningKey")
    jwt_key: str | None = Field(default=None, alias="JWTKey")
    jwt_duration: timedelta | None = Field(default=None, alias="JWTDuration")
    general_key: str | None = Field(default=None, alias="GeneralKey")
    general_duration: timedelta | None = Field(default=None, alias="GeneralDuration")
    issuer: str | None = Field(default=None, alias="Issuer")
    audience: str | None = Field(default=None, alias="Audience")
    validate_audience: bool = Field(default=True, alias="ValidateAudience")
    validate_issuer: bool = Field(default=True, alias="ValidateIssuer")
    validate_expiry: bool = Field(default=True, alias="ValidateExpiry")
    validate_signature: bool = Field(default=True, alias="ValidateSignature")
    default_duration: timedelta | None = Field(default=None, alias="DefaultDuration")
    type_claim: str = Field(default=DEFAULT_TYPE_CLAIM, alias="TypeClaim")
    leeway: timedelta = Field(default=timedelta(0), alias="Leeway")
    categories: dict[str, CategorySettings] = Field(default_factory=dict, alias="Categories")

    @field_validator(
        "jwt_duration", "general_duration", "default_duration", "leeway", mode="before",
    )
    @classmethod
    def parse_durations(cls, value: Any) -> Any:
        return _parse_timespan(value)

    def to_config(self) -> TokenConfig:
        """Resolve the bound values into a TokenConfig.

        The shared key is ``SigningKey``, else ``GeneralKey``, else ``JWTKey``.
        When ``JWTKey``/``JWTDuration`` differ from the shared values they
        become the ``JWT`` category, unless ``Categories`` already defines it.

        Raises:
            TokenConfigError: If no signing key is bound or a value is invalid.
        """
        signing_key = self.signing_key or self.general_key or self.jwt_key
        if not signing_key:
            raise TokenConfigError("No signing key configured (SigningKey, GeneralKey or JWTKey)")

        categories = {
            label: CategoryConfig(key=c.key, duration=c.duration)
            for label, c in self.categories.items()
        }
        jwt_key = self.jwt_key if self.jwt_key != signing_key else None
        labels = {normalize_token_type(label) for label in categories}
        if (jwt_key or self.jwt_duration is not None) and TokenType.JWT.name not in labels:
            categories[TokenType.JWT.name] = CategoryConfig(key=jwt_key, duration=self.jwt_duration)

        default_duration = self.default_duration
        if default_duration is None:
            default_duration = self.general_duration

        return TokenConfig(
            signing_key=signing_key,
            issuer=self.issuer,
            audience=self.audience,
            validate_audience=self.validate_audience,
            validate_issuer=self.validate_issuer,
            validate_expiry=self.validate_expiry,
            validate_signature=self.validate_signature,
            default_duration=default_duration,
            categories=categories,
            type_claim=self.type_claim,
            leeway=self.leeway,
        )


def _get_section(configuration: Mapping[str, Any], section: str) -> Any:
    """Walk a ``:``-separated section path, e.g. ``"Auth:TokenConfig"``."""
    node: Any = configuration
    for part in section.split(":"):
        if not isinstance(node, Mapping) or part not in node:
            raise TokenConfigError(f"Configuration section '{section}' not found")
        node = node[part]
    if not isinstance(node, Mapping):
        raise TokenConfigError(f"Configuration section '{section}' is not a mapping")
    return node


def config_from_section(
    configuration: Mapping[str, Any], section: str = "TokenConfig",
) -> TokenConfig:
    """Bind a named configuration section into a TokenConfig.

    Raises:
        TokenConfigError: If the section is missing or holds invalid values.
    """
    values = _get_section(configuration, section)
    try:
        settings = TokenSettings.model_validate(values)
    except ValidationError as e:
        raise TokenConfigError(f"Invalid '{section}' configuration: {e}") from e

    logger.debug("Bound token configuration from section '%s'", section)
    return settings.to_config()


def config_from_callback(configure: Callable[[TokenSettings], None]) -> TokenConfig:
    """Build a TokenConfig from a callback that fills in a fresh TokenSettings.

    Assignments are validated like section values, so TimeSpan strings work.

    Raises:
        TokenConfigError: If the callback assigns an invalid value or no signing key.
    """
    settings = TokenSettings()
    try:
        configure(settings)
    except ValidationError as e:
        raise TokenConfigError(f"Invalid token configuration: {e}") from e

    return settings.to_config()
