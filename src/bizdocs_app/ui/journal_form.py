from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bizdocs_sdk import (
    DocumentRecord,
    DocumentType,
    JournalLines,
    JournalStatus,
    validate_journal_entry,
)
from bizdocs_sdk.journal import MEMO_REQUIRED_REFERENCES
from bizdocs_sdk.payloads import build_journal_payload
from bizdocs_sdk.validation import ValidationIssue

from bizdocs_app.ui.components.totals_panel import JournalTotalsPanel
from bizdocs_app.ui.document_form import DocumentFormController


@dataclass
class JournalEntryForm(DocumentFormController):
    """Debit/credit entry against accounts; only a balanced entry leaves the form."""

    document_type: DocumentType = DocumentType.JOURNAL_ENTRY
    lines: JournalLines = field(default_factory=JournalLines)
    reference_type: str | None = None
    memo: str | None = None

    def __post_init__(self) -> None:
        if self.document_type != DocumentType.JOURNAL_ENTRY:
            raise ValueError(f"{self.document_type.value} is not a journal entry")

    def set_reference_type(self, value: str | None) -> dict[str, Any]:
        self.reference_type = value or None
        self.field_errors.pop("memo", None)
        return {"ok": True, "memo_required": self.memo_required}

    def set_memo(self, value: str | None) -> dict[str, Any]:
        self.memo = value
        self.field_errors.pop("memo", None)
        return {"ok": True}

    @property
    def memo_required(self) -> bool:
        return self.reference_type in MEMO_REQUIRED_REFERENCES

    def add_line(self) -> dict[str, Any]:
        line = self.lines.add_line()
        return {"ok": True, "line_id": line.id, "totals": self._render_totals()}

    def update_line(self, line_id: str, field_name: str, value: Any) -> dict[str, Any]:
        self.lines.update_line(line_id, field_name, value)
        return {"ok": True, "totals": self._render_totals()}

    def remove_line(self, line_id: str) -> dict[str, Any]:
        self.lines.remove_line(line_id)
        return {"ok": True, "totals": self._render_totals()}

    def post(self) -> dict[str, Any]:
        if not self.lines.is_balanced():
            difference = self.lines.totals().difference
            return {"ok": False, "error": f"Total debit must equal total credit (difference {difference:.2f})"}
        return self._run_action("post", JournalStatus.POSTED)

    def void(self, *, confirmed: bool) -> dict[str, Any]:
        if not confirmed:
            return {"ok": False, "error": "Void confirmation is required"}
        return self._run_action("void", JournalStatus.VOID)

    def _balanced(self) -> bool:
        return self.lines.is_balanced()

    def _has_body(self) -> bool:
        return bool(self.lines.lines)

    def _reset_body(self) -> None:
        self.lines = JournalLines()
        self.reference_type = None
        self.memo = None

    def _hydrate_body(self, record: DocumentRecord) -> None:
        self.lines.load(record.lines)
        self.reference_type = record.field("reference")
        self.memo = record.field("description")

    def _document_issues(self) -> list[ValidationIssue]:
        return validate_journal_entry(self.lines.lines, reference_type=self.reference_type, memo=self.memo)

    def _build_payload(self) -> dict[str, Any]:
        return build_journal_payload(
            self.policy,
            header=self.header,
            lines=self.lines.lines,
            reference_type=self.reference_type,
            memo=self.memo,
            payment=self.payment,
        )

    def _render_totals(self) -> dict[str, Any]:
        return JournalTotalsPanel(self.lines.totals()).render()

    def _render_body(self) -> dict[str, Any]:
        return {
            "lines": [
                {
                    "id": line.id,
                    "account_reference": line.account_reference,
                    "debit": line.debit,
                    "credit": line.credit,
                }
                for line in self.lines.lines
            ],
            "reference_type": self.reference_type,
            "memo_required": self.memo_required,
            "totals": self._render_totals(),
        }
