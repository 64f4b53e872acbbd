from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from .document_types import DocumentFamily
from .exceptions import DocumentStateError


class JournalStatus(str, Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    VOID = "VOID"


class TradeStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    RECEIVED = "RECEIVED"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


JOURNAL_TRANSITIONS: dict[JournalStatus, frozenset[JournalStatus]] = {
    JournalStatus.DRAFT: frozenset({JournalStatus.POSTED}),
    JournalStatus.POSTED: frozenset({JournalStatus.VOID}),
    JournalStatus.VOID: frozenset(),
}

# OVERDUE is observed from the due date, never requested, so it is no target here.
TRADE_TRANSITIONS: dict[TradeStatus, frozenset[TradeStatus]] = {
    TradeStatus.DRAFT: frozenset({TradeStatus.SENT, TradeStatus.RECEIVED, TradeStatus.PAID, TradeStatus.CANCELLED}),
    TradeStatus.SENT: frozenset({TradeStatus.PAID, TradeStatus.CANCELLED}),
    TradeStatus.RECEIVED: frozenset({TradeStatus.PAID, TradeStatus.CANCELLED}),
    TradeStatus.OVERDUE: frozenset({TradeStatus.PAID, TradeStatus.CANCELLED}),
    TradeStatus.PAID: frozenset(),
    TradeStatus.CANCELLED: frozenset(),
}

TRADE_TERMINAL = frozenset({TradeStatus.PAID, TradeStatus.CANCELLED})

# Server action endpoints and the document family each one applies to.
ACTION_FAMILIES: dict[str, DocumentFamily] = {
    "post": DocumentFamily.LEDGER,
    "void": DocumentFamily.LEDGER,
    "approve": DocumentFamily.TRADE,
    "complete": DocumentFamily.TRADE,
    "pay": DocumentFamily.TRADE,
    "cancel": DocumentFamily.TRADE,
}

_LEGACY_STATUS = {
    "PENDING": "DRAFT",
    "APPROVED": "POSTED",
    "UNPAID": "SENT",
    "CANCELED": "CANCELLED",
    "VOIDED": "VOID",
}


def parse_status(family: DocumentFamily, value: str | None) -> JournalStatus | TradeStatus:
    raw = (value or "DRAFT").strip().upper()
    raw = _LEGACY_STATUS.get(raw, raw)
    if family == DocumentFamily.LEDGER:
        if raw in JournalStatus.__members__:
            return JournalStatus(raw)
        return JournalStatus.DRAFT
    if raw == "POSTED":
        raw = "SENT"
    if raw in TradeStatus.__members__:
        return TradeStatus(raw)
    return TradeStatus.DRAFT


def can_transition(current: JournalStatus | TradeStatus, target: JournalStatus | TradeStatus) -> bool:
    if isinstance(current, JournalStatus) and isinstance(target, JournalStatus):
        return target in JOURNAL_TRANSITIONS[current]
    if isinstance(current, TradeStatus) and isinstance(target, TradeStatus):
        return target in TRADE_TRANSITIONS[current]
    return False


def ensure_transition(current: JournalStatus | TradeStatus, target: JournalStatus | TradeStatus) -> None:
    if not can_transition(current, target):
        family = "journal" if isinstance(current, JournalStatus) else "trade"
        raise DocumentStateError(family, current.value, target.value)


def initial_trade_status(balance: Decimal | None, settled_amount: Decimal) -> TradeStatus:
    if balance is not None and settled_amount > 0 and balance <= 0:
        return TradeStatus.PAID
    return TradeStatus.DRAFT


def status_after_payment(current: TradeStatus, balance_after: Decimal) -> TradeStatus:
    """PAID only once the balance is settled; otherwise the status stays."""
    if current in TRADE_TERMINAL:
        raise DocumentStateError("trade", current.value, TradeStatus.PAID.value)
    if balance_after <= 0:
        return TradeStatus.PAID
    return current


def observe_trade_status(
    status: TradeStatus,
    *,
    due_date: date | None,
    balance: Decimal | None,
    today: date | None = None,
) -> TradeStatus:
    if status not in {TradeStatus.SENT, TradeStatus.RECEIVED, TradeStatus.OVERDUE}:
        return status
    if due_date is None or balance is None:
        return status
    current_day = today or date.today()
    if due_date < current_day and balance > 0:
        return TradeStatus.OVERDUE
    return status


@dataclass(frozen=True)
class DocumentActionAvailability:
    can_edit: bool
    can_approve: bool
    can_pay: bool
    can_cancel: bool
    can_post: bool
    can_void: bool
    can_delete: bool


def document_action_availability(
    status: JournalStatus | TradeStatus,
    *,
    persisted: bool,
    balanced: bool = True,
) -> DocumentActionAvailability:
    if isinstance(status, JournalStatus):
        return DocumentActionAvailability(
            can_edit=status == JournalStatus.DRAFT,
            can_approve=False,
            can_pay=False,
            can_cancel=False,
            can_post=persisted and status == JournalStatus.DRAFT and balanced,
            can_void=persisted and status == JournalStatus.POSTED,
            can_delete=persisted and status == JournalStatus.DRAFT,
        )
    return DocumentActionAvailability(
        can_edit=status not in TRADE_TERMINAL,
        can_approve=persisted and status == TradeStatus.DRAFT,
        can_pay=persisted and status not in TRADE_TERMINAL,
        can_cancel=persisted and status not in TRADE_TERMINAL,
        can_post=False,
        can_void=False,
        can_delete=persisted and status == TradeStatus.DRAFT,
    )
