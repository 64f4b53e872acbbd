from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .validation import ValidationIssue


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    ONLINE = "ONLINE"
    CARD = "CARD"


TRACEABLE_METHODS = frozenset({PaymentMethod.BANK_TRANSFER, PaymentMethod.CHEQUE})

# Labels the form dropdowns have used over time.
_METHOD_LABELS = {
    "cash": PaymentMethod.CASH,
    "hand in cash": PaymentMethod.CASH,
    "bank transfer": PaymentMethod.BANK_TRANSFER,
    "bank transfer (online)": PaymentMethod.BANK_TRANSFER,
    "bank_transfer": PaymentMethod.BANK_TRANSFER,
    "cheque": PaymentMethod.CHEQUE,
    "check": PaymentMethod.CHEQUE,
    "online": PaymentMethod.ONLINE,
    "card": PaymentMethod.CARD,
}


@dataclass(frozen=True)
class PaymentDetails:
    method: PaymentMethod | None = None
    account_number: str | None = None
    attachment_ref: str | None = None


def normalize_payment_method(value: PaymentMethod | str | None) -> PaymentMethod | None:
    if value is None:
        return None
    if isinstance(value, PaymentMethod):
        return value
    if not isinstance(value, str):
        return None
    return _METHOD_LABELS.get(value.strip().lower())


def requires_attachment_and_account(method: PaymentMethod | str | None) -> bool:
    return normalize_payment_method(method) in TRACEABLE_METHODS


def attachment_label(method: PaymentMethod | str | None) -> str:
    if normalize_payment_method(method) == PaymentMethod.CHEQUE:
        return "Cheque image"
    return "Receipt image"


def validate_payment_details(details: PaymentDetails) -> list[ValidationIssue]:
    if not requires_attachment_and_account(details.method):
        return []
    method = normalize_payment_method(details.method)
    label = "Bank Transfer" if method == PaymentMethod.BANK_TRANSFER else "Cheque"
    issues: list[ValidationIssue] = []
    if not (details.account_number or "").strip():
        issues.append(
            ValidationIssue(
                field="payment.account_number",
                reason=f"Account number is required for {label} payments",
            )
        )
    if not (details.attachment_ref or "").strip():
        issues.append(
            ValidationIssue(
                field="payment.attachment_ref",
                reason=f"{attachment_label(method)} is required for {label} payments",
            )
        )
    return issues
