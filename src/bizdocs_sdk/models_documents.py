from __future__ import annotations

from datetime import date as Date
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ServiceModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)


class DocumentHeader(ServiceModel):
    company_id: int | str | None = None
    counterparty_id: int | str | None = None
    document_number: str = ""
    date: Date | None = None
    due_date: Date | None = None
    status: str = "DRAFT"
    remarks: str | None = None


class TradeLinePayload(ServiceModel):
    item_id: int | str | None = None
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_id: int | str | None = None
    tax_amount: Decimal = Decimal("0")
    line_total: Decimal


class JournalLinePayload(ServiceModel):
    account_name: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


class DocumentRecord(ServiceModel):
    id: int | str | None = None
    status: str | None = None
    date: Date | None = None
    due_date: Date | None = None
    company_id: int | str | None = None
    lines: list[dict[str, Any]] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def record_id(self) -> str | None:
        return None if self.id is None else str(self.id)

    def field(self, name: str, default: Any = None) -> Any:
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(name, default)


class DocumentListPage(ServiceModel):
    data: list[DocumentRecord] = Field(default_factory=list)
    total: int = 0
    limit: int | None = None
    offset: int | None = None


class DocumentQuery(ServiceModel):
    company_id: int | str | None = None
    status: str | None = None
    search: str | None = None
    from_date: Date | str | None = Field(default=None, alias="from")
    to_date: Date | str | None = Field(default=None, alias="to")
    limit: int | None = None
    offset: int | None = None


class NextNumberResponse(ServiceModel):
    next_number: int | str

    @property
    def value(self) -> str:
        return str(self.next_number)


class CatalogItem(ServiceModel):
    id: int | str
    name: str | None = None
    item_name: str | None = None
    sale_price: Decimal | None = None
    purchase_price: Decimal | None = None
    rate: Decimal | None = None

    @property
    def label(self) -> str:
        return self.item_name or self.name or str(self.id)

    def rate_for(self, side: Literal["sale", "purchase"]) -> Decimal | None:
        preferred = self.sale_price if side == "sale" else self.purchase_price
        if preferred is not None:
            return preferred
        return self.rate


class TaxOption(ServiceModel):
    id: int | str
    name: str | None = None
    tax_name: str | None = None
    percentage: Decimal | None = None
    tax_percentage: Decimal | None = None

    @property
    def label(self) -> str:
        return self.tax_name or self.name or str(self.id)

    @property
    def rate_percent(self) -> Decimal:
        value = self.tax_percentage if self.tax_percentage is not None else self.percentage
        return value if value is not None else Decimal("0")


class Counterparty(ServiceModel):
    id: int | str
    name: str | None = None
    customer_name: str | None = None
    vendor_name: str | None = None

    @property
    def label(self) -> str:
        return self.customer_name or self.vendor_name or self.name or str(self.id)
