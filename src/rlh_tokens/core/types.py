"""Token type labels and their canonical form."""

from enum import StrEnum

from rlh_tokens.errors import InvalidTokenTypeError


class TokenType(StrEnum):
    """Well-known token categories. Any other string label works too."""

    JWT = "JWT"
    PASSWORD_RESET = "PASSWORD_RESET"
    CONFIRM_ACCOUNT = "CONFIRM_ACCOUNT"


def normalize_token_type(value: str | TokenType | None) -> str:
    """Ensure the token type name is standardised across creation/validation.

    Converts to uppercase and replaces spaces with ``_``. Two labels name the
    same type iff their normalized forms are equal.

    Raises:
        InvalidTokenTypeError: If value is None.
    """
    if value is None:
        raise InvalidTokenTypeError()
    if isinstance(value, TokenType):
        return value.name

    return str(value).upper().replace(" ", "_")
