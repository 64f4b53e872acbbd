from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    DocumentNumberConflictError,
    EnvelopeRejectedError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ServerError,
    ValidationError,
)

_STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthError,
    403: PermissionError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}
# Statuses on which the service reports a document number that is already taken.
_NUMBER_CONFLICT_STATUSES = {400, 409, 422}
_DUPLICATE_NUMBER_CODES = {"DUPLICATE_DOCUMENT_NUMBER", "DUPLICATE_NUMBER", "NUMBER_TAKEN"}
_DUPLICATE_NUMBER_HINTS = ("already exists", "duplicate")


def is_duplicate_number(code: str, message: str) -> bool:
    if code.upper() in _DUPLICATE_NUMBER_CODES:
        return True
    lowered = message.lower()
    return "number" in lowered and any(hint in lowered for hint in _DUPLICATE_NUMBER_HINTS)


def _error_class(status_code: int, code: str, message: str) -> type[ApiError]:
    if status_code in _NUMBER_CONFLICT_STATUSES and is_duplicate_number(code, message):
        return DocumentNumberConflictError
    if status_code >= 500:
        return ServerError
    return _STATUS_ERRORS.get(status_code, ApiError)


def _payload_details(payload: Mapping[str, object]) -> object | None:
    return payload.get("details") or payload.get("errors")


def map_error(status_code: int, payload: Mapping[str, object] | None, request_id: str | None) -> ApiError:
    """Turn a non-2xx response body into the matching ApiError subclass."""
    payload = payload or {}
    code = str(payload.get("code") or "HTTP_ERROR")
    message = str(payload.get("message") or payload.get("error") or "Request failed")
    if payload.get("request_id") is not None:
        request_id = str(payload["request_id"])
    error_cls = _error_class(status_code, code, message)
    return error_cls(
        code=code,
        message=message,
        details=_payload_details(payload),
        request_id=request_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )


def map_envelope_rejection(payload: Mapping[str, object], status_code: int, request_id: str | None) -> ApiError:
    """A 2xx whose envelope says ``success: false`` is still a rejection."""
    code = str(payload.get("code") or "REJECTED")
    message = str(payload.get("message") or payload.get("error") or "Request rejected")
    error_cls = DocumentNumberConflictError if is_duplicate_number(code, message) else EnvelopeRejectedError
    return error_cls(
        code=code,
        message=message,
        details=_payload_details(payload),
        request_id=request_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )
