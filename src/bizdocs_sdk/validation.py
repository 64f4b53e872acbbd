from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    reason: str
    row_index: int | None = None


class ClientValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        location = f"row {issue.row_index}" if issue.row_index is not None else "document"
        return f"{location} {issue.field}: {issue.reason}"

    def field_errors(self) -> dict[str, str]:
        return issues_to_field_errors(self.issues)


def issues_to_field_errors(issues: Iterable[ValidationIssue]) -> dict[str, str]:
    errors: dict[str, str] = {}
    for issue in issues:
        key = issue.field if issue.row_index is None else f"lines[{issue.row_index}].{issue.field}"
        errors.setdefault(key, issue.reason)
    return errors


def require_fields(values: Mapping[str, Any], labels: Mapping[str, str]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for key, label in labels.items():
        value = values.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            issues.append(ValidationIssue(field=key, reason=f"{label} is required"))
    return issues


def raise_for_issues(issues: list[ValidationIssue]) -> None:
    if issues:
        raise ClientValidationError(issues)
