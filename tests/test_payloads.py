from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from bizdocs_sdk.document_types import DocumentType, policy_for
from bizdocs_sdk.journal import JournalLine
from bizdocs_sdk.ledger import LineItemLedger
from bizdocs_sdk.models_documents import DocumentHeader
from bizdocs_sdk.payloads import build_journal_payload, build_trade_payload
from bizdocs_sdk.payment_policy import PaymentDetails, PaymentMethod
from bizdocs_sdk.totals import TaxSelection, compute_document_totals
from bizdocs_sdk.validation import ClientValidationError


def _ledger() -> LineItemLedger:
    ledger = LineItemLedger()
    priced = ledger.add_line()
    ledger.update_line(priced.id, "item_reference", "11")
    ledger.update_line(priced.id, "quantity", 2)
    ledger.update_line(priced.id, "unit_rate", "100")
    ledger.add_line()
    return ledger


def test_sales_invoice_payload_uses_wire_names() -> None:
    policy = policy_for(DocumentType.SALES_INVOICE)
    ledger = _ledger()
    tax = TaxSelection(tax_id="vat", rate_percent=Decimal("10"))
    totals = compute_document_totals(ledger, tax, "5", "100", policy)
    header = DocumentHeader(company_id=1, counterparty_id=4, document_number="INV-1", date=date(2026, 2, 1))

    payload = build_trade_payload(
        policy,
        header=header,
        ledger=ledger,
        tax=tax,
        totals=totals,
        payment=PaymentDetails(method=PaymentMethod.CHEQUE, account_number="001", attachment_ref="cheque.png"),
    )

    assert payload["invoiceNumber"] == "INV-1"
    assert payload["customerId"] == 4
    assert payload["companyId"] == 1
    assert payload["date"] == "2026-02-01"
    assert payload["paymentMethod"] == "CHEQUE"
    assert payload["accountNumber"] == "001"
    assert payload["receiptImage"] == "cheque.png"
    assert payload["taxId"] == "vat"
    assert payload["grossAmount"] == "200"
    assert Decimal(payload["netAmount"]) == Decimal("215")
    assert Decimal(payload["balance"]) == Decimal("115")
    assert Decimal(payload["paidAmount"]) == Decimal("100")
    assert len(payload["lines"]) == 1
    line = payload["lines"][0]
    assert line["itemId"] == "11"
    assert Decimal(line["lineTotal"]) == Decimal("200")
    assert Decimal(line["taxAmount"]) == Decimal("20")


def test_return_payload_carries_refund_and_no_balance() -> None:
    policy = policy_for(DocumentType.PURCHASE_RETURN)
    ledger = _ledger()
    totals = compute_document_totals(ledger, None, 0, "200", policy)

    payload = build_trade_payload(
        policy,
        header=DocumentHeader(counterparty_id=9, document_number="PR-1"),
        ledger=ledger,
        tax=None,
        totals=totals,
        payment=PaymentDetails(),
    )

    assert payload["vendorId"] == 9
    assert payload["returnNumber"] == "PR-1"
    assert payload["refundAmount"] == "200"
    assert "balance" not in payload
    assert "taxId" not in payload


def test_journal_payload() -> None:
    payload = build_journal_payload(
        policy_for(DocumentType.JOURNAL_ENTRY),
        header=DocumentHeader(document_number="JE-000001", date=date(2026, 1, 31)),
        lines=[
            JournalLine(id="a", account_reference="Cash", debit=Decimal("50")),
            JournalLine(id="b", account_reference="Capital", credit=Decimal("50")),
        ],
        reference_type="Opening Balance",
        memo="Opening capital",
        payment=PaymentDetails(),
    )

    assert payload["entryNumber"] == "JE-000001"
    assert payload["reference"] == "Opening Balance"
    assert payload["description"] == "Opening capital"
    assert payload["lines"][0] == {"accountName": "Cash", "debit": "50", "credit": "0"}


def test_unbalanced_journal_is_never_serialized() -> None:
    with pytest.raises(ClientValidationError) as excinfo:
        build_journal_payload(
            policy_for(DocumentType.JOURNAL_ENTRY),
            header=DocumentHeader(document_number="JE-000002", date=date(2026, 1, 31)),
            lines=[
                JournalLine(id="a", account_reference="Cash", debit=Decimal("1000")),
                JournalLine(id="b", account_reference="Capital", credit=Decimal("999")),
            ],
            reference_type=None,
            memo=None,
            payment=PaymentDetails(),
        )

    assert excinfo.value.field_errors() == {"totals": "Total debit must equal total credit (difference 1.00)"}
