"""Value objects returned by the token service."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class Claim:
    """A key/value assertion embedded in or checked against a token. Keys are case-sensitive."""

    key: str
    value: str


@dataclass(frozen=True, slots=True)
class Token:
    """An issued token and its descriptive metadata."""

    type: str
    value: str
    created: datetime
    expires_in: timedelta

    @property
    def expires_at(self) -> datetime:
        return self.created + self.expires_in


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A single reason a token failed validation."""

    field: str
    message: str


class ResultStatus(StrEnum):
    SUCCESS = "success"
    TOKEN_INVALID = "token_invalid"


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of a validation call: success, or an invalid token with every error found."""

    status: ResultStatus
    errors: tuple[ValidationError, ...] = ()

    def __post_init__(self) -> None:
        if self.status is ResultStatus.SUCCESS and self.errors:
            raise ValueError("A successful result cannot carry errors")
        if self.status is ResultStatus.TOKEN_INVALID and not self.errors:
            raise ValueError("An invalid token result needs at least one error")

    @classmethod
    def success(cls) -> "Result":
        return cls(ResultStatus.SUCCESS)

    @classmethod
    def invalid_token(cls, errors: Iterable[ValidationError]) -> "Result":
        return cls(ResultStatus.TOKEN_INVALID, tuple(errors))

    @classmethod
    def invalid_token_field(cls, field: str, message: str) -> "Result":
        return cls.invalid_token([ValidationError(field, message)])

    @property
    def is_success(self) -> bool:
        return self.status is ResultStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.is_success
