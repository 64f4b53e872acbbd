from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .document_types import DocumentTypePolicy
from .ledger import LineItemLedger
from .money import ZERO, present, to_decimal


@dataclass(frozen=True)
class TaxSelection:
    tax_id: str
    rate_percent: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    gross: Decimal
    tax_amount: Decimal
    discount: Decimal
    subtotal: Decimal
    paid_or_refund_amount: Decimal
    balance: Decimal | None

    def presented(self) -> dict[str, Decimal | None]:
        return {
            "gross": present(self.gross),
            "tax_amount": present(self.tax_amount),
            "discount": present(self.discount),
            "subtotal": present(self.subtotal),
            "paid_or_refund_amount": present(self.paid_or_refund_amount),
            "balance": present(self.balance),
        }


def compute_tax_amount(gross: Decimal, tax_selection: TaxSelection | None) -> Decimal:
    if tax_selection is None:
        return ZERO
    return gross * tax_selection.rate_percent / Decimal(100)


def resolve_totals(
    gross: Decimal,
    tax_amount: Decimal,
    discount: Decimal | Any,
    paid_or_refund: Decimal | Any,
    *,
    refund: bool = False,
) -> DocumentTotals:
    discount_value = to_decimal(discount)
    amount = to_decimal(paid_or_refund)
    subtotal = gross + tax_amount - discount_value
    return DocumentTotals(
        gross=gross,
        tax_amount=tax_amount,
        discount=discount_value,
        subtotal=subtotal,
        paid_or_refund_amount=amount,
        balance=None if refund else subtotal - amount,
    )


def compute_document_totals(
    ledger: LineItemLedger,
    tax_selection: TaxSelection | None,
    discount: Decimal | Any,
    paid_or_refund: Decimal | Any,
    policy: DocumentTypePolicy,
) -> DocumentTotals:
    gross = ledger.gross_total()
    tax_amount = compute_tax_amount(gross, tax_selection if policy.tax_applicable else None)
    return resolve_totals(gross, tax_amount, discount, paid_or_refund, refund=policy.is_refund)
