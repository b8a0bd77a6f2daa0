"""Example app using rlh-tokens for account confirmation and password reset links.

This app:
  - Issues typed, expiring tokens bound to a user id
  - Validates them when the link is followed, reporting every problem found
  - Holds no token state; everything needed is inside the signed token

Run:  uvicorn main:app --reload --port 8000
"""

import os
from datetime import timedelta

from fastapi import Depends, FastAPI, HTTPException

from rlh_tokens import TokenService, TokenType
from rlh_tokens.integrations.fastapi import add_token_service, get_token_service

# ---------------------------------------------------------------------------
# Setup — bind the "TokenConfig" section, as a host would from its settings file
# ---------------------------------------------------------------------------

settings = {
    "TokenConfig": {
        "GeneralKey": os.environ.get("TOKEN_GENERAL_KEY", "change-me-general-signing-key-0123456789"),
        "GeneralDuration": "1.00:00:00",
        "JWTKey": os.environ.get("TOKEN_JWT_KEY", "change-me-jwt-signing-key-0123456789abcd"),
        "JWTDuration": "00:15:00",
        "Issuer": "example-app",
        "Audience": "example-app",
    },
}

app = FastAPI(title="RLH Tokens Example")
add_token_service(app, settings)


# ---------------------------------------------------------------------------
# Account confirmation — free-form type label, per-call duration
# ---------------------------------------------------------------------------


@app.post("/users/{user_id}/confirmation")
def send_confirmation(user_id: str, tokens: TokenService = Depends(get_token_service)):
    token = tokens.issue_token_of_type("confirm account", timedelta(hours=48), {"user": user_id})
    return {"link": f"/users/{user_id}/confirm?token={token.value}", "expires_at": token.expires_at}


@app.get("/users/{user_id}/confirm")
def confirm(user_id: str, token: str, tokens: TokenService = Depends(get_token_service)):
    result = tokens.validate_token_of_type("confirm account", token, {"user": user_id})
    if not result:
        raise HTTPException(
            status_code=400,
            detail={
                "error": result.status,
                "errors": [{"field": e.field, "message": e.message} for e in result.errors],
            },
        )
    return {"confirmed": user_id}


# ---------------------------------------------------------------------------
# Password reset and API tokens — well-known categories, configured durations
# ---------------------------------------------------------------------------


@app.post("/users/{user_id}/password-reset")
def request_reset(user_id: str, tokens: TokenService = Depends(get_token_service)):
    token = tokens.issue_token_of_type(TokenType.PASSWORD_RESET, claims={"user": user_id})
    return {"token": token.value, "expires_in": token.expires_in.total_seconds()}


@app.post("/users/{user_id}/api-token")
def api_token(user_id: str, tokens: TokenService = Depends(get_token_service)):
    # Signed with the JWT category key, valid for JWTDuration
    token = tokens.issue_token_of_type(TokenType.JWT, claims={"sub": user_id})
    return {"access_token": token.value, "token_type": "Bearer"}


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
