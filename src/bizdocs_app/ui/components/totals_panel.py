from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from bizdocs_sdk import DocumentTotals, JournalTotals
from bizdocs_sdk.money import present


@dataclass
class TotalsPanel:
    totals: DocumentTotals
    is_refund: bool = False

    def render(self) -> dict[str, Any]:
        shown = self.totals.presented()
        balance = shown["balance"]
        return {
            "gross": shown["gross"],
            "tax_amount": shown["tax_amount"],
            "discount": shown["discount"],
            "subtotal": shown["subtotal"],
            "refund_amount" if self.is_refund else "paid_amount": shown["paid_or_refund_amount"],
            "balance": balance,
            "is_settled": balance is not None and balance <= Decimal("0"),
            "is_overpaid": balance is not None and balance < Decimal("0"),
        }


@dataclass
class JournalTotalsPanel:
    totals: JournalTotals

    def render(self) -> dict[str, Any]:
        return {
            "total_debit": present(self.totals.debit),
            "total_credit": present(self.totals.credit),
            "difference": present(self.totals.difference),
            "is_balanced": self.totals.difference == 0,
        }
