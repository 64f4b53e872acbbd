from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

TELEMETRY_CATEGORIES = frozenset(
    {"document_submit", "document_action", "numbering", "api_call_result", "validation", "error"}
)
# Compared after dropping case and separators, so accountNumber and account_number both match.
_SENSITIVE_KEYS = frozenset(
    {
        "accountnumber",
        "attachmentref",
        "receiptimage",
        "token",
        "authorization",
        "sessioncookie",
        "remarks",
        "memo",
        "description",
    }
)
_CONTEXT_VALUE_TYPES = (str, int, float, bool, type(None), list, tuple)


@dataclass(frozen=True)
class TelemetryEvent:
    category: str
    name: str
    document_type: str
    action: str
    timestamp_utc: str
    request_id: str | None = None
    duration_ms: int | None = None
    success: bool | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _normalized_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def _check_context(context: dict[str, Any] | None) -> None:
    if not context:
        return
    sensitive = sorted(key for key in context if _normalized_key(key) in _SENSITIVE_KEYS)
    if sensitive:
        raise ValueError(f"Sensitive keys are forbidden in telemetry context: {sensitive}")
    nested = sorted(key for key, value in context.items() if not isinstance(value, _CONTEXT_VALUE_TYPES))
    if nested:
        raise ValueError(f"Telemetry context values must be plain scalars or lists: {nested}")


def build_event(
    *,
    category: str,
    name: str,
    document_type: str,
    action: str,
    request_id: str | None = None,
    duration_ms: int | None = None,
    success: bool | None = None,
    error_code: str | None = None,
    context: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> TelemetryEvent:
    if category not in TELEMETRY_CATEGORIES:
        raise ValueError(f"Unsupported telemetry category: {category}")
    _check_context(context)
    return TelemetryEvent(
        category=category,
        name=name,
        document_type=document_type,
        action=action,
        timestamp_utc=(now or datetime.now(timezone.utc)).isoformat(),
        request_id=request_id,
        duration_ms=duration_ms,
        success=success,
        error_code=error_code,
        context=context,
    )
