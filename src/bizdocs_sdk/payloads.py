from __future__ import annotations

from typing import Any, Mapping

from .document_types import DocumentTypePolicy
from .journal import JournalLine, validate_journal_entry
from .ledger import LineItemLedger
from .models_documents import DocumentHeader, JournalLinePayload, TradeLinePayload
from .money import ZERO
from .payment_policy import PaymentDetails
from .totals import DocumentTotals, TaxSelection
from .validation import raise_for_issues


def _header_fields(policy: DocumentTypePolicy, header: DocumentHeader) -> dict[str, Any]:
    body = header.model_dump(mode="json", by_alias=True, exclude_none=True)
    number = body.pop("documentNumber", "")
    counterparty = body.pop("counterpartyId", None)
    body[policy.number_field] = number
    if policy.counterparty_field and counterparty is not None:
        body[policy.counterparty_field] = counterparty
    return body


def _payment_fields(payment: PaymentDetails) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if payment.method is not None:
        body["paymentMethod"] = payment.method.value
    if payment.account_number:
        body["accountNumber"] = payment.account_number
    if payment.attachment_ref:
        body["receiptImage"] = payment.attachment_ref
    return body


def build_trade_payload(
    policy: DocumentTypePolicy,
    *,
    header: DocumentHeader,
    ledger: LineItemLedger,
    tax: TaxSelection | None,
    totals: DocumentTotals,
    payment: PaymentDetails,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    rate = tax.rate_percent if tax is not None and policy.tax_applicable else None
    lines = [
        TradeLinePayload(
            item_id=line.item_reference,
            description=line.description or line.item_reference,
            quantity=line.quantity,
            unit_price=line.unit_rate,
            tax_id=tax.tax_id if rate is not None else None,
            tax_amount=line.computed_amount * rate / 100 if rate is not None else ZERO,
            line_total=line.computed_amount,
        ).model_dump(mode="json", by_alias=True, exclude_none=True)
        for line in ledger.priced_lines()
    ]
    body = _header_fields(policy, header)
    body.update(_payment_fields(payment))
    if rate is not None:
        body["taxId"] = tax.tax_id
    body.update(
        {
            "discount": str(totals.discount),
            policy.settlement_field or "paidAmount": str(totals.paid_or_refund_amount),
            "grossAmount": str(totals.gross),
            "taxAmount": str(totals.tax_amount),
            "netAmount": str(totals.subtotal),
            "lines": lines,
        }
    )
    if totals.balance is not None:
        body["balance"] = str(totals.balance)
    if extra:
        body.update({key: value for key, value in extra.items() if value not in (None, "")})
    return body


def build_journal_payload(
    policy: DocumentTypePolicy,
    *,
    header: DocumentHeader,
    lines: list[JournalLine],
    reference_type: str | None,
    memo: str | None,
    payment: PaymentDetails,
) -> dict[str, Any]:
    # Unbalanced entries never leave the client.
    raise_for_issues([issue for issue in validate_journal_entry(lines) if issue.field == "totals"])
    body = _header_fields(policy, header)
    body.update(_payment_fields(payment))
    if reference_type:
        body["reference"] = reference_type
    if memo:
        body["description"] = memo
    body["lines"] = [
        JournalLinePayload(account_name=line.account_reference, debit=line.debit, credit=line.credit).model_dump(
            mode="json", by_alias=True
        )
        for line in lines
    ]
    return body
