from __future__ import annotations

from decimal import Decimal

import pytest

from bizdocs_sdk.document_types import DocumentType, policy_for
from bizdocs_sdk.ledger import LineItemLedger
from bizdocs_sdk.totals import TaxSelection, compute_document_totals, compute_tax_amount, resolve_totals


def _scenario_ledger() -> LineItemLedger:
    ledger = LineItemLedger()
    for qty, rate in ((2, 100), (1, 250), (5, 40)):
        line = ledger.add_line()
        ledger.update_line(line.id, "quantity", qty)
        ledger.update_line(line.id, "unit_rate", rate)
    return ledger


def test_invoice_scenario() -> None:
    totals = compute_document_totals(
        _scenario_ledger(),
        TaxSelection(tax_id="vat", rate_percent=Decimal("10")),
        "15",
        "300",
        policy_for(DocumentType.SALES_INVOICE),
    )
    assert totals.gross == Decimal("650")
    assert totals.tax_amount == Decimal("65")
    assert totals.subtotal == Decimal("700")
    assert totals.balance == Decimal("400")


def test_no_tax_means_zero_tax() -> None:
    assert compute_tax_amount(Decimal("650"), None) == 0


def test_tax_is_not_rounded_internally() -> None:
    tax = compute_tax_amount(Decimal("10.05"), TaxSelection(tax_id="t", rate_percent=Decimal("7.5")))
    assert tax == Decimal("0.75375")


def test_presented_rounds_half_up_to_cents() -> None:
    totals = resolve_totals(Decimal("10.05"), Decimal("0.75375"), 0, 0)
    shown = totals.presented()
    assert shown["tax_amount"] == Decimal("0.75")
    assert shown["subtotal"] == Decimal("10.80")


@pytest.mark.parametrize(
    ("gross", "tax", "discount", "paid"),
    [
        ("0", "0", "0", "0"),
        ("100", "0", "0", "0"),
        ("100", "18", "0", "50"),
        ("100", "0", "10", "0"),
        ("99.99", "9.999", "0.01", "200"),
    ],
)
def test_resolver_formulas(gross: str, tax: str, discount: str, paid: str) -> None:
    totals = resolve_totals(Decimal(gross), Decimal(tax), discount, paid)
    assert totals.subtotal == Decimal(gross) + Decimal(tax) - Decimal(discount)
    assert totals.balance == totals.subtotal - Decimal(paid)


def test_overpayment_gives_negative_balance() -> None:
    totals = resolve_totals(Decimal("100"), Decimal("0"), 0, "150")
    assert totals.balance == Decimal("-50")


def test_refund_documents_have_no_balance() -> None:
    totals = compute_document_totals(
        _scenario_ledger(),
        None,
        0,
        "650",
        policy_for(DocumentType.SALES_RETURN),
    )
    assert totals.paid_or_refund_amount == Decimal("650")
    assert totals.balance is None
    assert totals.presented()["balance"] is None


def test_journal_policy_ignores_tax() -> None:
    totals = compute_document_totals(
        _scenario_ledger(),
        TaxSelection(tax_id="vat", rate_percent=Decimal("10")),
        0,
        0,
        policy_for(DocumentType.JOURNAL_ENTRY),
    )
    assert totals.tax_amount == 0
