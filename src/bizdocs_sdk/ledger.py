from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping

from .money import ZERO, to_decimal

LedgerListener = Callable[["LineItemLedger"], None]

_FIELD_ALIASES = {
    "item": "item_reference",
    "itemReference": "item_reference",
    "qty": "quantity",
    "rate": "unit_rate",
    "unitRate": "unit_rate",
    "unit_price": "unit_rate",
}


@dataclass
class LineItem:
    id: str
    item_reference: str = ""
    description: str | None = None
    quantity: Decimal = ZERO
    unit_rate: Decimal = ZERO
    computed_amount: Decimal = ZERO

    def recompute(self) -> None:
        self.computed_amount = self.quantity * self.unit_rate


@dataclass
class LineItemLedger:
    """Ordered line entries of a priced document.

    The amount of a line is always ``quantity * unit_rate``. Picking an item
    pulls its catalog rate when the catalog knows it.
    """

    lines: list[LineItem] = field(default_factory=list)
    catalog_rates: dict[str, Decimal] = field(default_factory=dict)
    _listeners: list[LedgerListener] = field(default_factory=list, repr=False)

    def subscribe(self, listener: LedgerListener) -> None:
        self._listeners.append(listener)

    def set_catalog(self, rates: Mapping[str, Any]) -> None:
        self.catalog_rates = {str(key): to_decimal(value) for key, value in rates.items()}

    def add_line(self) -> LineItem:
        line = LineItem(id=uuid.uuid4().hex)
        self.lines.append(line)
        self._notify()
        return line

    def update_line(self, line_id: str, field_name: str, value: Any) -> None:
        line = self.find(line_id)
        if line is None:
            return
        name = _FIELD_ALIASES.get(field_name, field_name)
        if name == "quantity":
            line.quantity = to_decimal(value)
        elif name == "unit_rate":
            line.unit_rate = to_decimal(value)
        elif name == "item_reference":
            line.item_reference = "" if value is None else str(value)
            rate = self.catalog_rates.get(line.item_reference)
            if rate is not None:
                line.unit_rate = rate
        elif name == "description":
            line.description = None if value is None else str(value)
        else:
            return
        line.recompute()
        self._notify()

    def remove_line(self, line_id: str) -> None:
        remaining = [line for line in self.lines if line.id != line_id]
        if len(remaining) == len(self.lines):
            return
        self.lines = remaining
        self._notify()

    def find(self, line_id: str) -> LineItem | None:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def gross_total(self) -> Decimal:
        return sum((line.computed_amount for line in self.lines), ZERO)

    def load(self, rows: Iterable[Mapping[str, Any]]) -> None:
        loaded: list[LineItem] = []
        for row in rows:
            line = LineItem(
                id=str(row.get("id") or uuid.uuid4().hex),
                item_reference=str(
                    row.get("item_reference") or row.get("itemReference") or row.get("itemId") or row.get("item") or ""
                ),
                description=row.get("description"),
                quantity=to_decimal(row.get("quantity")),
                unit_rate=to_decimal(row.get("unit_rate", row.get("unitPrice", row.get("rate")))),
            )
            line.recompute()
            loaded.append(line)
        self.lines = loaded
        self._notify()

    def priced_lines(self) -> list[LineItem]:
        return [line for line in self.lines if line.item_reference]

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
