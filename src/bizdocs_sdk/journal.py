from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from .money import CENT, to_cents, to_decimal
from .validation import ValidationIssue

MEMO_REQUIRED_REFERENCES = frozenset({"Tax Adjustment", "Opening Balance"})


@dataclass
class JournalLine:
    id: str
    account_reference: str = ""
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


@dataclass(frozen=True)
class JournalTotals:
    debit: Decimal
    credit: Decimal

    @property
    def difference(self) -> Decimal:
        return abs(self.debit - self.credit)


def journal_totals(lines: Iterable[JournalLine]) -> JournalTotals:
    debit_cents = 0
    credit_cents = 0
    for line in lines:
        debit_cents += to_cents(line.debit)
        credit_cents += to_cents(line.credit)
    return JournalTotals(debit=Decimal(debit_cents) * CENT, credit=Decimal(credit_cents) * CENT)


def is_balanced(lines: Iterable[JournalLine]) -> bool:
    totals = journal_totals(lines)
    return to_cents(totals.debit) == to_cents(totals.credit)


def imbalance(lines: Iterable[JournalLine]) -> Decimal:
    return journal_totals(lines).difference


def validate_journal_entry(
    lines: Sequence[JournalLine],
    *,
    reference_type: str | None = None,
    memo: str | None = None,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not lines:
        issues.append(ValidationIssue(field="lines", reason="At least one journal line is required"))
    for idx, line in enumerate(lines):
        if not line.account_reference.strip():
            issues.append(ValidationIssue(field="account_reference", reason="Account is required", row_index=idx))
    totals = journal_totals(lines)
    if to_cents(totals.debit) != to_cents(totals.credit):
        issues.append(
            ValidationIssue(
                field="totals",
                reason=f"Total debit must equal total credit (difference {totals.difference:.2f})",
            )
        )
    if reference_type in MEMO_REQUIRED_REFERENCES and not (memo or "").strip():
        issues.append(
            ValidationIssue(
                field="memo",
                reason="Memo is required for Tax Adjustment and Opening Balance entries",
            )
        )
    return issues


@dataclass
class JournalLines:
    lines: list[JournalLine] = field(default_factory=list)

    def add_line(self) -> JournalLine:
        line = JournalLine(id=uuid.uuid4().hex)
        self.lines.append(line)
        return line

    def update_line(self, line_id: str, field_name: str, value: Any) -> None:
        for line in self.lines:
            if line.id != line_id:
                continue
            if field_name in {"account_reference", "accountName", "account"}:
                line.account_reference = "" if value is None else str(value)
            elif field_name == "debit":
                line.debit = to_decimal(value)
            elif field_name == "credit":
                line.credit = to_decimal(value)
            return

    def remove_line(self, line_id: str) -> None:
        self.lines = [line for line in self.lines if line.id != line_id]

    def totals(self) -> JournalTotals:
        return journal_totals(self.lines)

    def is_balanced(self) -> bool:
        return is_balanced(self.lines)

    def load(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self.lines = [
            JournalLine(
                id=str(row.get("id") or uuid.uuid4().hex),
                account_reference=str(row.get("account_reference") or row.get("accountName") or ""),
                debit=to_decimal(row.get("debit")),
                credit=to_decimal(row.get("credit")),
            )
            for row in rows
        ]
