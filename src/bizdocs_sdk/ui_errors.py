from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, DocumentNumberConflictError, EnvelopeRejectedError, TransportError


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    request_id: str | None = None
    field: str | None = None


def to_user_facing_error(exc: ApiError) -> UserFacingError:
    # Service rejections carry the message the user should read; keep it verbatim.
    message = exc.message.strip()
    field = None
    if isinstance(exc, DocumentNumberConflictError):
        message = message or "Document number is already in use"
        field = "document_number"
    elif isinstance(exc, TransportError) and exc.code == "TRANSPORT_ERROR":
        message = "Could not reach the server"
    elif isinstance(exc, EnvelopeRejectedError):
        message = message or "The service rejected the document"
    summary = exc.code if not exc.status_code else f"{exc.code} (HTTP {exc.status_code})"
    if exc.details:
        summary = f"{summary}: {exc.details}"
    return UserFacingError(message=message or "Request failed", details=summary, request_id=exc.request_id, field=field)
