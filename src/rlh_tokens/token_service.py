"""TokenService — main entry point for issuing and validating typed tokens.

Stateless apart from the frozen TokenConfig and the clock, so one instance
can be shared across threads or tasks.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from rlh_tokens.config import TokenConfig
from rlh_tokens.core.claims import ClaimsInput, build_claim_set
from rlh_tokens.core.schemas import Result, Token
from rlh_tokens.core.tokens import sign_token
from rlh_tokens.core.types import TokenType, normalize_token_type
from rlh_tokens.core.validation import validate_token
from rlh_tokens.errors import TokenConfigError

logger = logging.getLogger("rlh_tokens.service")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """Issues and validates signed, expiring tokens that carry a type marker.

    Args:
        config: Keys, durations and validation policy.
        clock: Zero-argument callable returning the current aware UTC datetime
            (default ``datetime.now(UTC)``).

    Usage:
        with TokenService(config) as service:
            token = service.issue_token_of_type("confirm account", timedelta(hours=24), {"user": "42"})
            result = service.validate_token_of_type("confirm account", token.value, {"user": "42"})
    """

    def __init__(
        self,
        config: TokenConfig,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or _utc_now

    @property
    def config(self) -> TokenConfig:
        """Read-only access to the config."""
        return self._config

    def issue_token_of_type(
        self,
        token_type: str | TokenType,
        duration: timedelta | None = None,
        claims: ClaimsInput = None,
    ) -> Token:
        """Create a new token of the given type. Optional claims are embedded alongside the type.

        Args:
            token_type: Type label or TokenType; validation must use a label with the same normalized form.
            duration: How long the token stays valid. Defaults to the type's
                configured duration, then ``config.default_duration``.
            claims: Additional claims (Claim objects, pairs or a mapping).

        Raises:
            InvalidTokenTypeError: If token_type is None.
            TokenConfigError: If no duration is given or configured for the type.
        """
        normalized = normalize_token_type(token_type)

        if duration is None:
            duration = self._config.duration_for(normalized)
        if duration is None:
            raise TokenConfigError(
                f"No duration given or configured for token type '{normalized}'"
            )

        claim_set = build_claim_set(normalized, claims, type_claim=self._config.type_claim)
        created = self._clock()
        value = sign_token(
            issuer=self._config.issuer,
            audience=self._config.audience,
            claims=claim_set,
            expires_at=created + duration,
            key=self._config.key_for(normalized),
            issued_at=created,
        )

        logger.debug("Issued %s token expiring in %s", normalized, duration)
        return Token(type=normalized, value=value, created=created, expires_in=duration)

    def validate_token_of_type(
        self,
        token_type: str | TokenType,
        token_value: str,
        claims: ClaimsInput = None,
    ) -> Result:
        """Validate a token of the given type.

        If claims were included when creating the token they should be passed
        here too. Untrusted input never raises: malformed, expired or
        mismatched tokens produce an invalid Result listing every problem.

        Raises:
            InvalidTokenTypeError: If token_type is None.
        """
        normalized = normalize_token_type(token_type)
        expected = build_claim_set(normalized, claims, type_claim=self._config.type_claim)

        result = validate_token(
            token_value,
            expected,
            self._config,
            key=self._config.key_for(normalized),
            now=self._clock(),
        )
        if not result:
            logger.info(
                "Rejected %s token (%d validation errors)", normalized, len(result.errors),
            )
        return result

    def close(self) -> None:
        """No resources are held; present for symmetric acquire/release in hosts."""

    def __enter__(self) -> "TokenService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
