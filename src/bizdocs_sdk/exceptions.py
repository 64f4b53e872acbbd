from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    request_id: str | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        request = f" request_id={self.request_id}" if self.request_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{request}"


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class AuthError(UnauthorizedError):
    """Session cookie or bearer token rejected."""


class PermissionError(ForbiddenError):
    """Company scope or role denies the operation."""


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class DocumentNumberConflictError(ConflictError):
    """The service already holds a document with the submitted number."""


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class EnvelopeRejectedError(ValidationError):
    """2xx response whose envelope carried success=false."""


class DocumentStateError(ValueError):
    def __init__(self, family: str, current: str, target: str) -> None:
        self.family = family
        self.current = current
        self.target = target
        super().__init__(f"{family} document cannot move from {current} to {target}")


# Failures the persistence layer absorbs with the local fallback.
OFFLINE_ERRORS: tuple[type[ApiError], ...] = (TransportError, ServerError)
