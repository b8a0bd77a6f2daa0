"""Tests for TokenService — issue/validate round trips through the public facade."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from conftest import TEST_JWT_KEY, TEST_KEY, FrozenClock
from rlh_tokens import (
    Claim,
    InvalidTokenTypeError,
    ResultStatus,
    Token,
    TokenConfigError,
    TokenService,
    TokenType,
)
from rlh_tokens.config import DEFAULT_TYPE_CLAIM

DAY = timedelta(hours=24)


def _fields(result) -> list[str]:
    return [e.field for e in result.errors]


class TestIssue:
    def test_returns_token_metadata(self, config, clock):
        service = TokenService(config, clock=clock)
        token = service.issue_token_of_type("confirm account", DAY)

        assert isinstance(token, Token)
        assert token.type == "CONFIRM_ACCOUNT"
        assert token.created == clock.now
        assert token.expires_in == DAY
        assert token.expires_at == clock.now + DAY

    def test_wire_format_readable_by_standard_tooling(self, service):
        token = service.issue_token_of_type("confirm account", DAY, {"user": "42"})

        payload = jwt.decode(
            token.value, TEST_KEY, algorithms=["HS256"], audience="TestAudience", issuer="TestIssuer",
        )
        assert payload[DEFAULT_TYPE_CLAIM] == "CONFIRM_ACCOUNT"
        assert payload["user"] == "42"
        assert jwt.get_unverified_header(token.value)["alg"] == "HS256"

    def test_fractional_hours(self, config, clock):
        service = TokenService(config, clock=clock)
        token = service.issue_token_of_type("t", timedelta(hours=1.5))

        payload = jwt.decode(token.value, options={"verify_signature": False})
        assert payload["exp"] == int((clock.now + timedelta(minutes=90)).timestamp())

    def test_reserved_claim_override(self, service):
        claims = [Claim(DEFAULT_TYPE_CLAIM, "ADMIN"), Claim("user", "42")]
        token = service.issue_token_of_type("confirm account", DAY, claims)

        payload = jwt.decode(token.value, options={"verify_signature": False})
        assert payload[DEFAULT_TYPE_CLAIM] == "CONFIRM_ACCOUNT"

    def test_caller_claims_not_mutated(self, service):
        claims = [Claim("user", "42")]
        service.issue_token_of_type("confirm account", DAY, claims)
        service.validate_token_of_type("confirm account", "x", claims)
        assert claims == [Claim("user", "42")]

    def test_none_type_raises(self, service):
        with pytest.raises(InvalidTokenTypeError):
            service.issue_token_of_type(None, DAY)

    def test_missing_duration_raises(self, service):
        with pytest.raises(TokenConfigError, match="No duration"):
            service.issue_token_of_type("confirm account")

    def test_default_duration_used(self, config, clock):
        service = TokenService(replace(config, default_duration=timedelta(hours=2)), clock=clock)
        token = service.issue_token_of_type("confirm account")
        assert token.expires_in == timedelta(hours=2)


class TestRoundTrip:
    def test_valid_token(self, service):
        token = service.issue_token_of_type("confirm account", DAY, [])
        result = service.validate_token_of_type("confirm account", token.value)
        assert result.status is ResultStatus.SUCCESS

    def test_with_claims(self, service):
        claims = [Claim("MY_TYPE", "my_type_value"), Claim("user", "42")]
        token = service.issue_token_of_type("my custom claim type", DAY, claims)
        assert service.validate_token_of_type("my custom claim type", token.value, claims)

    def test_mapping_claims(self, service):
        token = service.issue_token_of_type("reset", DAY, {"user": "42"})
        assert service.validate_token_of_type("reset", token.value, {"user": "42"})

    def test_non_string_claim_values(self, service):
        claims = [Claim("n", 5), Claim("flag", True)]
        token = service.issue_token_of_type("reset", DAY, claims)

        payload = jwt.decode(token.value, options={"verify_signature": False})
        assert payload["n"] == "5"
        assert service.validate_token_of_type("reset", token.value, claims)

    def test_validate_with_subset_of_claims(self, service):
        token = service.issue_token_of_type("reset", DAY, {"user": "42", "email": "a@b.c"})
        assert service.validate_token_of_type("reset", token.value, {"user": "42"})

    def test_normalized_labels_are_equivalent(self, service):
        token = service.issue_token_of_type("confirm account", DAY)
        assert service.validate_token_of_type("CONFIRM ACCOUNT", token.value)
        assert service.validate_token_of_type("CONFIRM_ACCOUNT", token.value)
        assert service.validate_token_of_type(TokenType.CONFIRM_ACCOUNT, token.value)

    def test_custom_type_claim_key(self, config):
        service = TokenService(replace(config, type_claim="Type"))
        token = service.issue_token_of_type(TokenType.PASSWORD_RESET, DAY)

        payload = jwt.decode(token.value, options={"verify_signature": False})
        assert payload["Type"] == "PASSWORD_RESET"
        assert DEFAULT_TYPE_CLAIM not in payload
        assert service.validate_token_of_type("password reset", token.value)


class TestRejections:
    def test_wrong_type(self, service):
        token = service.issue_token_of_type("confirm account", DAY, [])
        result = service.validate_token_of_type("WrongType", token.value)

        assert result.status is ResultStatus.TOKEN_INVALID
        assert _fields(result) == [DEFAULT_TYPE_CLAIM]

    def test_claim_value_mismatch(self, service):
        token = service.issue_token_of_type("confirm account", DAY, [Claim("A_TYPE", "Value1")])
        result = service.validate_token_of_type("confirm account", token.value, [Claim("A_TYPE", "Value2")])

        assert result.status is ResultStatus.TOKEN_INVALID
        assert _fields(result) == ["A_TYPE"]

    def test_already_expired(self, service):
        token = service.issue_token_of_type("confirm account", timedelta(seconds=-1))
        result = service.validate_token_of_type("confirm account", token.value)
        assert _fields(result) == ["ValidTo"]

    def test_already_expired_with_expiry_check_disabled(self, config):
        service = TokenService(replace(config, validate_expiry=False))
        token = service.issue_token_of_type("confirm account", timedelta(seconds=-1))
        assert service.validate_token_of_type("confirm account", token.value).is_success

    def test_expires_as_clock_advances(self, config):
        clock = FrozenClock(datetime.now(UTC))
        service = TokenService(config, clock=clock)
        token = service.issue_token_of_type("confirm account", timedelta(minutes=5))

        assert service.validate_token_of_type("confirm account", token.value)
        clock.advance(timedelta(minutes=6))
        assert _fields(service.validate_token_of_type("confirm account", token.value)) == ["ValidTo"]

    def test_audience_check_disabled(self, config):
        issuer_service = TokenService(replace(config, audience="SomeoneElse"))
        token = issuer_service.issue_token_of_type("confirm account", DAY)

        strict = TokenService(config)
        relaxed = TokenService(replace(config, validate_audience=False))
        assert _fields(strict.validate_token_of_type("confirm account", token.value)) == ["Audience"]
        assert relaxed.validate_token_of_type("confirm account", token.value).is_success

    def test_malformed_input_short_circuits(self, service):
        result = service.validate_token_of_type("confirm account", "not-a-token", {"A": "1", "B": "2"})
        assert _fields(result) == ["token"]

    def test_none_token_value_is_untrusted_input(self, service):
        result = service.validate_token_of_type("confirm account", None)
        assert _fields(result) == ["token"]

    def test_none_type_raises(self, service):
        with pytest.raises(InvalidTokenTypeError):
            service.validate_token_of_type(None, "not-a-token")

    def test_token_from_other_key(self, config):
        other = TokenService(replace(config, signing_key="some-other-signing-key-0123456789abc"))
        token = other.issue_token_of_type("confirm account", DAY)
        result = TokenService(config).validate_token_of_type("confirm account", token.value)
        assert _fields(result) == ["Signature"]


class TestCategories:
    def test_category_key_and_duration(self, category_config, clock):
        service = TokenService(category_config, clock=clock)
        token = service.issue_token_of_type(TokenType.JWT, claims=[Claim("sub", "42")])

        assert token.type == "JWT"
        assert token.expires_in == timedelta(minutes=15)
        jwt.decode(token.value, TEST_JWT_KEY, algorithms=["HS256"], options={"verify_aud": False, "verify_exp": False})

    def test_general_types_use_shared_key(self, category_config):
        service = TokenService(category_config)
        token = service.issue_token_of_type(TokenType.PASSWORD_RESET)

        assert token.expires_in == timedelta(hours=24)
        jwt.decode(token.value, TEST_KEY, algorithms=["HS256"], audience="TestAudience")
        assert service.validate_token_of_type("password reset", token.value)

    def test_category_round_trip(self, category_config):
        service = TokenService(category_config)
        token = service.issue_token_of_type(TokenType.JWT, claims={"sub": "42"})
        assert service.validate_token_of_type("jwt", token.value, {"sub": "42"})

    def test_cross_category_fails(self, category_config):
        service = TokenService(category_config)
        token = service.issue_token_of_type(TokenType.JWT)
        result = service.validate_token_of_type(TokenType.CONFIRM_ACCOUNT, token.value)
        assert _fields(result) == ["Signature", DEFAULT_TYPE_CLAIM]

    def test_per_call_duration_overrides_category(self, category_config):
        service = TokenService(category_config)
        token = service.issue_token_of_type(TokenType.JWT, timedelta(minutes=1))
        assert token.expires_in == timedelta(minutes=1)


class TestLifetime:
    def test_context_manager(self, config):
        with TokenService(config) as service:
            token = service.issue_token_of_type("my custom claim type", DAY, [Claim("MY_TYPE", "v")])
            assert service.validate_token_of_type("my custom claim type", token.value, [Claim("MY_TYPE", "v")])

    def test_close_is_idempotent(self, service):
        service.close()
        service.close()
        assert service.config.issuer == "TestIssuer"
