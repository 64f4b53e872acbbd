from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models_documents import CatalogItem, Counterparty, TaxOption
from .base import BaseClient


@dataclass
class CatalogClient(BaseClient):
    """Read-only master data the document forms pick from."""

    def list_items(self, company_id: str | int | None = None) -> list[CatalogItem]:
        return [CatalogItem.model_validate(row) for row in self._rows("/items", company_id, "items")]

    def list_taxes(self, company_id: str | int | None = None) -> list[TaxOption]:
        return [TaxOption.model_validate(row) for row in self._rows("/taxes", company_id, "taxes")]

    def list_customers(self, company_id: str | int | None = None) -> list[Counterparty]:
        return [Counterparty.model_validate(row) for row in self._rows("/customers", company_id, "customers")]

    def list_vendors(self, company_id: str | int | None = None) -> list[Counterparty]:
        return [Counterparty.model_validate(row) for row in self._rows("/vendors", company_id, "vendors")]

    def _rows(self, path: str, company_id: str | int | None, module: str) -> list[dict[str, Any]]:
        params = {"companyId": company_id} if company_id is not None else None
        data = self._request("GET", path, params=params, module=module, operation="list")
        # List endpoints nest a page inside the envelope data; some return a bare array.
        if isinstance(data, dict):
            data = data.get("data", [])
        if not isinstance(data, list):
            raise ValueError(f"Expected {module} list data to be a JSON array")
        return [row for row in data if isinstance(row, dict)]
