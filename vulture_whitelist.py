"""Vulture whitelist — false positives that are actually used by consumers or frameworks."""

# ---------------------------------------------------------------------------
# Public API (used by host applications, not internally)
# ---------------------------------------------------------------------------
from rlh_tokens.core.schemas import Result, Token
from rlh_tokens.integrations.fastapi import add_token_service, create_token_service_dep, get_token_service
from rlh_tokens.token_service import TokenService

TokenService.close
Token.expires_at
Result.is_success
add_token_service
create_token_service_dep
get_token_service

# ---------------------------------------------------------------------------
# Pydantic validators and dataclass fields (called by the frameworks)
# ---------------------------------------------------------------------------
_.parse_duration
_.parse_durations
_.message
_.created
