from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ViewStateStatus(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"
    PARTIAL_ERROR = "partial_error"
    FATAL_ERROR = "fatal_error"
    OFFLINE = "offline"


_BLOCKING = frozenset({ViewStateStatus.LOADING, ViewStateStatus.FATAL_ERROR})
OFFLINE_MESSAGE = "Saved on this device; not yet synced"


@dataclass(frozen=True)
class ViewState:
    status: ViewStateStatus
    message: str | None = None
    request_id: str | None = None
    data_available: bool = False

    @property
    def blocks_editing(self) -> bool:
        return self.status in _BLOCKING and not self.data_available

    def render(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "request_id": self.request_id,
            "data_available": self.data_available,
            "blocks_editing": self.blocks_editing,
        }


def resolve_state(
    *,
    is_loading: bool,
    error: str | None,
    has_data: bool,
    offline: bool = False,
    request_id: str | None = None,
) -> ViewState:
    """Pick the one banner a form shows; errors outrank the offline notice."""
    if is_loading:
        status, message = ViewStateStatus.LOADING, "Loading data..."
    elif error:
        status = ViewStateStatus.PARTIAL_ERROR if has_data else ViewStateStatus.FATAL_ERROR
        message = error
    elif offline:
        status, message = ViewStateStatus.OFFLINE, OFFLINE_MESSAGE
    elif not has_data:
        status, message = ViewStateStatus.EMPTY, "No data found"
    else:
        status, message = ViewStateStatus.READY, "Ready"
    return ViewState(status, message, request_id=request_id, data_available=has_data)
