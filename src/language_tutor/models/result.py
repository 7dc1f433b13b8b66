"""Tagged result returned across the gateway and client boundaries."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from language_tutor.models.tutor import ErrorBody

T = TypeVar("T")


class ErrorKind(StrEnum):
    """Failure categories and the HTTP status each maps to."""

    INVALID_REQUEST = "invalid_request"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"
    INTERNAL = "internal"
    TRANSPORT = "transport"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES.get(self, 500)


_STATUS_CODES = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    details: str | None = None

    def to_body(self) -> dict[str, str]:
        return ErrorBody(error=self.message, details=self.details).model_dump(exclude_none=True)
