from __future__ import annotations

from decimal import Decimal

from bizdocs_sdk.journal import JournalLine, JournalLines, imbalance, is_balanced, journal_totals, validate_journal_entry


def _lines(*pairs: tuple[str, str]) -> list[JournalLine]:
    return [
        JournalLine(id=str(idx), account_reference=f"acc-{idx}", debit=Decimal(debit), credit=Decimal(credit))
        for idx, (debit, credit) in enumerate(pairs)
    ]


def test_balanced_scenario_and_discrepancy() -> None:
    lines = _lines(("1000", "0"), ("0", "1000"))
    assert is_balanced(lines) is True

    lines[1].credit = Decimal("999")
    assert is_balanced(lines) is False
    assert imbalance(lines) == Decimal("1")


def test_single_sided_line_is_unbalanced() -> None:
    assert is_balanced(_lines(("100", "0"))) is False


def test_totals_are_exact_for_cent_amounts() -> None:
    lines = _lines(*[("0.1", "0")] * 3, ("0", "0.3"))
    totals = journal_totals(lines)
    assert totals.debit == Decimal("0.30")
    assert totals.credit == Decimal("0.30")
    assert is_balanced(lines) is True


def test_validation_reports_imbalance_amount() -> None:
    issues = validate_journal_entry(_lines(("1000", "0"), ("0", "999")))
    assert [issue.reason for issue in issues] == ["Total debit must equal total credit (difference 1.00)"]


def test_validation_requires_lines_and_accounts() -> None:
    assert validate_journal_entry([])[0].reason == "At least one journal line is required"

    lines = _lines(("10", "0"), ("0", "10"))
    lines[1].account_reference = " "
    issues = validate_journal_entry(lines)
    assert [(issue.field, issue.row_index) for issue in issues] == [("account_reference", 1)]


def test_memo_required_for_adjusting_references() -> None:
    lines = _lines(("10", "0"), ("0", "10"))
    assert validate_journal_entry(lines, reference_type="Opening Balance")[0].field == "memo"
    assert validate_journal_entry(lines, reference_type="Opening Balance", memo="FY open") == []
    assert validate_journal_entry(lines, reference_type="Sales") == []


def test_journal_lines_editing() -> None:
    journal = JournalLines()
    first = journal.add_line()
    second = journal.add_line()
    journal.update_line(first.id, "accountName", "Cash")
    journal.update_line(first.id, "debit", "250")
    journal.update_line(second.id, "account", "Sales")
    journal.update_line(second.id, "credit", "250")
    assert journal.is_balanced()

    journal.remove_line(second.id)
    assert journal.totals().difference == Decimal("250")
    journal.remove_line("missing")
    assert len(journal.lines) == 1
