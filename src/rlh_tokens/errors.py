"""Exceptions raised for caller misuse. Untrusted tokens never raise, they produce a Result."""


class TokenServiceError(Exception):
    """Base token service error with an error code."""

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidTokenTypeError(TokenServiceError, TypeError):
    """Raised when a token type label is missing (None)."""

    def __init__(self, message: str = "Token type must not be None"):
        super().__init__(message, "invalid_token_type")


class TokenConfigError(TokenServiceError, ValueError):
    """Raised when the token configuration is incomplete or invalid."""

    def __init__(self, message: str):
        super().__init__(message, "invalid_config")
