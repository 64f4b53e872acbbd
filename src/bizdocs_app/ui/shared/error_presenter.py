from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PresentedError:
    category: str
    user_message: str
    safe_to_retry: bool
    code: str
    details: dict[str, Any]


_FALLBACK_MESSAGES = {
    "validation": "Please review the highlighted fields and try again.",
    "permission_denied": "You do not have permission to perform this action.",
    "conflict": "This action cannot be completed in the current state.",
    "not_found": "The requested document was not found.",
    "transport": "Temporary connectivity issue. Please retry.",
    "server": "Service error. Try again shortly or contact support.",
    "unknown": "Unexpected error. Please try again.",
}
_GENERIC_CATEGORIES = frozenset({"transport", "server"})
_CODE_CATEGORIES = {
    "VALIDATION_ERROR": "validation",
    "CLIENT_VALIDATION": "validation",
    "REJECTED": "validation",
    "PERMISSION_DENIED": "permission_denied",
    "FORBIDDEN": "permission_denied",
    "NOT_FOUND": "not_found",
    "DUPLICATE_DOCUMENT_NUMBER": "conflict",
    "DUPLICATE_NUMBER": "conflict",
    "NUMBER_TAKEN": "conflict",
    "INVALID_TRANSITION": "conflict",
    "OFFLINE_RECORD": "conflict",
    "TRANSPORT_ERROR": "transport",
    "REQUEST_CANCELLED": "transport",
    "INTERNAL_ERROR": "server",
    "INVALID_RESPONSE": "server",
}
# First match wins; used only when the code itself is not recognised.
_KEYWORD_RULES = (
    ("permission_denied", ("permission", "forbidden", "denied", "403")),
    ("conflict", ("duplicate", "already", "conflict", "409")),
    ("validation", ("validation", "invalid", "required", "422")),
    ("not_found", ("not found", "404")),
    ("transport", ("timeout", "network", "connection", "could not reach")),
    ("server", ("500", "502", "503", "unavailable")),
)


class ErrorPresenter:
    """Maps service and client failures to consistent form feedback.

    Rejections from the service are authoritative and keep their own message.
    Only transport and server failures are replaced by a generic one.
    """

    def present(
        self,
        *,
        message: str,
        details: Any = None,
        request_id: str | None = None,
        action: str,
        code: str | None = None,
        allow_retry: bool = False,
    ) -> PresentedError:
        normalized_code = (code or _code_from(details) or "UNKNOWN").upper()
        category = _CODE_CATEGORIES.get(normalized_code) or _categorize(f"{message} {details} {normalized_code}")
        if category in _GENERIC_CATEGORIES or not message.strip():
            user_message = _FALLBACK_MESSAGES[category]
        else:
            user_message = message
        return PresentedError(
            category=category,
            user_message=user_message,
            safe_to_retry=allow_retry and category in _GENERIC_CATEGORIES,
            code=normalized_code,
            details={"code": normalized_code, "request_id": request_id, "action": action, "raw_details": details},
        )


def _categorize(probe: str) -> str:
    probe = probe.lower()
    for category, tokens in _KEYWORD_RULES:
        if any(token in probe for token in tokens):
            return category
    return "unknown"


def _code_from(details: Any) -> str | None:
    if isinstance(details, dict) and details.get("code"):
        return str(details["code"])
    return None
