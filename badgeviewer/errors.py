# errors.py
# Error taxonomy and the Result type returned by the API client
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

NETWORK_MESSAGE = "Please connect to the internet"
GENERIC_MESSAGE = "Something went wrong. Please try again."

class BadgeViewerError(Exception):
    """Base class for every expected failure"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __eq__(self, other):
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.status == other.status
        )

    def __hash__(self):
        return hash((type(self), self.message, self.status))

class ValidationError(BadgeViewerError):
    """Input rejected, either locally or by the server with a 4xx"""

class ApiError(BadgeViewerError):
    """Failure reported by (or on the way to) the remote API"""

class Unauthorized(ApiError):
    """Token missing, invalid or expired (401)"""

class NotFound(ApiError):
    pass

class ServerError(ApiError):
    """5xx or a response body we could not make sense of"""

class NetworkUnavailable(ApiError):
    """No connectivity or the request timed out"""

def user_message(error: BadgeViewerError) -> str:
    """Short non-technical message for an error shown next to a control"""
    if isinstance(error, NetworkUnavailable):
        return NETWORK_MESSAGE
    if isinstance(error, ValidationError):
        return error.message
    return GENERIC_MESSAGE

@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one API call: a value or an error, never both"""
    value: Optional[T] = None
    error: Optional[BadgeViewerError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BadgeViewerError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def unauthorized(self) -> bool:
        return isinstance(self.error, Unauthorized)
