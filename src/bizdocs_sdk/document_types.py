from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DocumentFamily(str, Enum):
    TRADE = "trade"
    LEDGER = "ledger"


class DocumentType(str, Enum):
    SALES_INVOICE = "sales-invoices"
    PURCHASE_INVOICE = "purchase-invoices"
    SALES_RETURN = "sales-returns"
    PURCHASE_RETURN = "purchase-returns"
    JOURNAL_ENTRY = "journal-entries"


@dataclass(frozen=True)
class DocumentTypePolicy:
    document_type: DocumentType
    family: DocumentFamily
    number_prefix: str
    number_field: str
    store_key: str
    list_route: str
    counterparty_field: str | None = None
    settlement_field: str | None = None
    is_refund: bool = False
    tax_applicable: bool = True
    issued_status: str = "SENT"

    @property
    def path(self) -> str:
        return f"/{self.document_type.value}"


POLICIES: dict[DocumentType, DocumentTypePolicy] = {
    DocumentType.SALES_INVOICE: DocumentTypePolicy(
        document_type=DocumentType.SALES_INVOICE,
        family=DocumentFamily.TRADE,
        number_prefix="INV",
        number_field="invoiceNumber",
        store_key="salesInvoices",
        list_route="/sales/invoice",
        counterparty_field="customerId",
        settlement_field="paidAmount",
    ),
    DocumentType.PURCHASE_INVOICE: DocumentTypePolicy(
        document_type=DocumentType.PURCHASE_INVOICE,
        family=DocumentFamily.TRADE,
        number_prefix="BILL",
        number_field="billNumber",
        store_key="purchaseInvoices",
        list_route="/purchase/invoice",
        counterparty_field="vendorId",
        settlement_field="paidAmount",
        issued_status="RECEIVED",
    ),
    DocumentType.SALES_RETURN: DocumentTypePolicy(
        document_type=DocumentType.SALES_RETURN,
        family=DocumentFamily.TRADE,
        number_prefix="SR",
        number_field="returnNumber",
        store_key="salesReturns",
        list_route="/sales/return",
        counterparty_field="customerId",
        settlement_field="refundAmount",
        is_refund=True,
    ),
    DocumentType.PURCHASE_RETURN: DocumentTypePolicy(
        document_type=DocumentType.PURCHASE_RETURN,
        family=DocumentFamily.TRADE,
        number_prefix="PR",
        number_field="returnNumber",
        store_key="purchaseReturns",
        list_route="/purchase/return",
        counterparty_field="vendorId",
        settlement_field="refundAmount",
        is_refund=True,
        issued_status="RECEIVED",
    ),
    DocumentType.JOURNAL_ENTRY: DocumentTypePolicy(
        document_type=DocumentType.JOURNAL_ENTRY,
        family=DocumentFamily.LEDGER,
        number_prefix="JE",
        number_field="entryNumber",
        store_key="journalEntries",
        list_route="/account/journal-entry",
        tax_applicable=False,
    ),
}


def policy_for(document_type: DocumentType | str) -> DocumentTypePolicy:
    return POLICIES[DocumentType(document_type)]
