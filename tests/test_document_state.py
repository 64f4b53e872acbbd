from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from bizdocs_sdk.document_state import (
    JournalStatus,
    TradeStatus,
    can_transition,
    document_action_availability,
    ensure_transition,
    initial_trade_status,
    observe_trade_status,
    parse_status,
    status_after_payment,
)
from bizdocs_sdk.document_types import DocumentFamily
from bizdocs_sdk.exceptions import DocumentStateError


def test_journal_transitions_are_one_way() -> None:
    assert can_transition(JournalStatus.DRAFT, JournalStatus.POSTED)
    assert can_transition(JournalStatus.POSTED, JournalStatus.VOID)
    assert not can_transition(JournalStatus.VOID, JournalStatus.POSTED)
    assert not can_transition(JournalStatus.VOID, JournalStatus.DRAFT)
    assert not can_transition(JournalStatus.POSTED, JournalStatus.DRAFT)
    assert not can_transition(JournalStatus.DRAFT, JournalStatus.VOID)


def test_overdue_is_never_a_transition_target() -> None:
    for status in TradeStatus:
        assert not can_transition(status, TradeStatus.OVERDUE)


@pytest.mark.parametrize("terminal", [TradeStatus.PAID, TradeStatus.CANCELLED])
def test_terminal_trade_statuses(terminal: TradeStatus) -> None:
    for target in TradeStatus:
        assert not can_transition(terminal, target)


def test_cancel_allowed_from_non_terminal_states() -> None:
    for status in (TradeStatus.DRAFT, TradeStatus.SENT, TradeStatus.RECEIVED, TradeStatus.OVERDUE):
        assert can_transition(status, TradeStatus.CANCELLED)


def test_ensure_transition_raises() -> None:
    with pytest.raises(DocumentStateError, match="VOID to POSTED"):
        ensure_transition(JournalStatus.VOID, JournalStatus.POSTED)


def test_mixed_families_never_transition() -> None:
    assert not can_transition(JournalStatus.DRAFT, TradeStatus.PAID)


def test_parse_status_handles_legacy_and_unknown_values() -> None:
    assert parse_status(DocumentFamily.LEDGER, "approved") == JournalStatus.POSTED
    assert parse_status(DocumentFamily.LEDGER, None) == JournalStatus.DRAFT
    assert parse_status(DocumentFamily.TRADE, "canceled") == TradeStatus.CANCELLED
    assert parse_status(DocumentFamily.TRADE, "Received") == TradeStatus.RECEIVED
    assert parse_status(DocumentFamily.TRADE, "weird") == TradeStatus.DRAFT


def test_initial_status_paid_in_full() -> None:
    assert initial_trade_status(Decimal("0"), Decimal("700")) == TradeStatus.PAID
    assert initial_trade_status(Decimal("400"), Decimal("300")) == TradeStatus.DRAFT
    assert initial_trade_status(Decimal("0"), Decimal("0")) == TradeStatus.DRAFT
    assert initial_trade_status(None, Decimal("10")) == TradeStatus.DRAFT


def test_payment_moves_to_paid_only_when_settled() -> None:
    assert status_after_payment(TradeStatus.SENT, Decimal("100")) == TradeStatus.SENT
    assert status_after_payment(TradeStatus.SENT, Decimal("0")) == TradeStatus.PAID
    assert status_after_payment(TradeStatus.OVERDUE, Decimal("-5")) == TradeStatus.PAID
    with pytest.raises(DocumentStateError):
        status_after_payment(TradeStatus.CANCELLED, Decimal("0"))


def test_overdue_is_observed() -> None:
    today = date(2026, 3, 10)
    past = date(2026, 3, 1)
    assert observe_trade_status(TradeStatus.SENT, due_date=past, balance=Decimal("5"), today=today) == TradeStatus.OVERDUE
    assert observe_trade_status(TradeStatus.SENT, due_date=past, balance=Decimal("0"), today=today) == TradeStatus.SENT
    assert observe_trade_status(TradeStatus.DRAFT, due_date=past, balance=Decimal("5"), today=today) == TradeStatus.DRAFT
    assert observe_trade_status(TradeStatus.SENT, due_date=None, balance=Decimal("5"), today=today) == TradeStatus.SENT


def test_action_availability() -> None:
    draft_journal = document_action_availability(JournalStatus.DRAFT, persisted=True, balanced=False)
    assert draft_journal.can_post is False
    assert draft_journal.can_edit is True
    posted = document_action_availability(JournalStatus.POSTED, persisted=True)
    assert posted.can_void and not posted.can_edit

    sent = document_action_availability(TradeStatus.SENT, persisted=True)
    assert sent.can_pay and sent.can_cancel and not sent.can_approve
    paid = document_action_availability(TradeStatus.PAID, persisted=True)
    assert not (paid.can_edit or paid.can_pay or paid.can_cancel)
    unsaved = document_action_availability(TradeStatus.DRAFT, persisted=False)
    assert not unsaved.can_approve
