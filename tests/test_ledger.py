from __future__ import annotations

from decimal import Decimal

from bizdocs_sdk.ledger import LineItemLedger


def _ledger_with(rows: list[tuple[str, str]]) -> LineItemLedger:
    ledger = LineItemLedger()
    for qty, rate in rows:
        line = ledger.add_line()
        ledger.update_line(line.id, "quantity", qty)
        ledger.update_line(line.id, "unit_rate", rate)
    return ledger


def test_new_line_defaults_to_zero() -> None:
    ledger = LineItemLedger()
    line = ledger.add_line()
    assert line.quantity == 0
    assert line.unit_rate == 0
    assert line.computed_amount == 0
    assert line.id


def test_line_ids_are_unique() -> None:
    ledger = LineItemLedger()
    ids = {ledger.add_line().id for _ in range(20)}
    assert len(ids) == 20


def test_amount_tracks_quantity_times_rate_without_drift() -> None:
    ledger = LineItemLedger()
    line = ledger.add_line()
    for _ in range(50):
        ledger.update_line(line.id, "quantity", "0.1")
        ledger.update_line(line.id, "unit_rate", "0.3")
        ledger.update_line(line.id, "quantity", "3")
    assert line.computed_amount == Decimal("0.9")
    assert line.computed_amount == line.quantity * line.unit_rate


def test_non_numeric_input_coerces_to_zero() -> None:
    ledger = LineItemLedger()
    line = ledger.add_line()
    ledger.update_line(line.id, "quantity", "abc")
    ledger.update_line(line.id, "unit_rate", None)
    assert line.quantity == 0
    assert line.computed_amount == 0


def test_item_selection_pulls_catalog_rate() -> None:
    ledger = LineItemLedger()
    ledger.set_catalog({"sku-1": "12.50"})
    line = ledger.add_line()
    ledger.update_line(line.id, "quantity", 4)
    ledger.update_line(line.id, "item_reference", "sku-1")
    assert line.unit_rate == Decimal("12.50")
    assert line.computed_amount == Decimal("50.00")


def test_unknown_item_keeps_current_rate() -> None:
    ledger = LineItemLedger()
    line = ledger.add_line()
    ledger.update_line(line.id, "rate", "7")
    ledger.update_line(line.id, "item", "unknown")
    assert line.unit_rate == Decimal("7")


def test_gross_total_follows_add_and_remove() -> None:
    ledger = _ledger_with([("2", "100"), ("1", "250"), ("5", "40")])
    assert ledger.gross_total() == Decimal("650")

    ledger.remove_line(ledger.lines[1].id)
    assert ledger.gross_total() == Decimal("400")
    assert ledger.gross_total() == sum(line.computed_amount for line in ledger.lines)


def test_unknown_ids_are_no_ops() -> None:
    ledger = _ledger_with([("1", "10")])
    notified: list[int] = []
    ledger.subscribe(lambda current: notified.append(len(current.lines)))

    ledger.update_line("missing", "quantity", 5)
    ledger.remove_line("missing")
    ledger.remove_line("missing")

    assert ledger.gross_total() == Decimal("10")
    assert notified == []


def test_every_mutation_notifies_listeners() -> None:
    ledger = LineItemLedger()
    totals: list[Decimal] = []
    ledger.subscribe(lambda current: totals.append(current.gross_total()))

    line = ledger.add_line()
    ledger.update_line(line.id, "quantity", 2)
    ledger.update_line(line.id, "unit_rate", 3)
    ledger.remove_line(line.id)

    assert totals == [Decimal("0"), Decimal("0"), Decimal("6"), Decimal("0")]


def test_load_reads_wire_lines() -> None:
    ledger = LineItemLedger()
    ledger.load([{"itemId": "7", "description": "Widget", "quantity": "3", "unitPrice": "2.5"}])
    assert ledger.lines[0].item_reference == "7"
    assert ledger.lines[0].computed_amount == Decimal("7.5")


def test_priced_lines_skip_rows_without_item() -> None:
    ledger = _ledger_with([("1", "10")])
    priced = ledger.add_line()
    ledger.update_line(priced.id, "item_reference", "sku-9")
    assert [line.id for line in ledger.priced_lines()] == [priced.id]
