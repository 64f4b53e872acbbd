from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPanel:
    """Retry affordance under a failed load; writes never get one."""

    operation: str
    is_mutation: bool
    has_transient_error: bool
    request_id: str | None = None

    def can_retry(self) -> bool:
        # Writes already fall back to the local store.
        return not self.is_mutation and self.has_transient_error

    def warning(self) -> str | None:
        if self.is_mutation:
            return "Saving is never retried automatically; submit again once the problem is fixed."
        if not self.has_transient_error:
            return "This failure will not go away by retrying."
        return None

    def render(self) -> dict[str, object]:
        return {
            "operation": self.operation,
            "enabled": self.can_retry(),
            "warning": self.warning(),
            "request_id": self.request_id,
        }
