"""RLH Tokens — signed, expiring, typed tokens for confirmation, reset and auth flows."""

__version__ = "0.1.0"

from rlh_tokens.config import CategoryConfig, TokenConfig
from rlh_tokens.core.claims import build_claim_set
from rlh_tokens.core.schemas import Claim, Result, ResultStatus, Token, ValidationError
from rlh_tokens.core.types import TokenType, normalize_token_type
from rlh_tokens.errors import InvalidTokenTypeError, TokenConfigError, TokenServiceError
from rlh_tokens.settings import TokenSettings, config_from_callback, config_from_section
from rlh_tokens.token_service import TokenService

__all__ = [
    "CategoryConfig",
    "Claim",
    "InvalidTokenTypeError",
    "Result",
    "ResultStatus",
    "Token",
    "TokenConfig",
    "TokenConfigError",
    "TokenService",
    "TokenServiceError",
    "TokenSettings",
    "TokenType",
    "ValidationError",
    "build_claim_set",
    "config_from_callback",
    "config_from_section",
    "normalize_token_type",
]
