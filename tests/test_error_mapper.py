from __future__ import annotations

import pytest

from bizdocs_sdk.error_mapper import is_duplicate_number, map_envelope_rejection, map_error
from bizdocs_sdk.exceptions import (
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


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (401, AuthError),
        (403, PermissionError),
        (404, NotFoundError),
        (422, ValidationError),
        (409, ConflictError),
        (429, RateLimitError),
        (503, ServerError),
    ],
)
def test_map_error_by_status(status: int, expected: type) -> None:
    err = map_error(status, {"code": "X", "message": "boom"}, "req-1")
    assert isinstance(err, expected)
    assert err.status_code == status
    assert err.request_id == "req-1"


def test_map_error_prefers_payload_request_id() -> None:
    err = map_error(500, {"message": "boom", "request_id": "srv-9"}, "req-1")
    assert err.request_id == "srv-9"


def test_duplicate_number_maps_to_number_conflict() -> None:
    err = map_error(409, {"code": "DUPLICATE_DOCUMENT_NUMBER", "message": "Invoice number INV-7 already exists"}, None)
    assert isinstance(err, DocumentNumberConflictError)
    assert err.message == "Invoice number INV-7 already exists"


def test_duplicate_detected_from_message_on_validation_status() -> None:
    err = map_error(400, {"code": "BAD_REQUEST", "message": "Bill number already exists"}, None)
    assert isinstance(err, DocumentNumberConflictError)


def test_is_duplicate_number_ignores_unrelated_messages() -> None:
    assert is_duplicate_number("VALIDATION_ERROR", "Customer is required") is False
    assert is_duplicate_number("number_taken", "") is True


def test_envelope_rejection_keeps_message_verbatim() -> None:
    err = map_envelope_rejection({"success": False, "message": "Credit limit exceeded for customer"}, 200, "r")
    assert isinstance(err, EnvelopeRejectedError)
    assert err.code == "REJECTED"
    assert err.message == "Credit limit exceeded for customer"


def test_envelope_rejection_duplicate_number() -> None:
    err = map_envelope_rejection({"success": False, "message": "Return number is duplicate"}, 200, None)
    assert isinstance(err, DocumentNumberConflictError)
