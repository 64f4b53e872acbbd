from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..document_types import DocumentType
from ..idempotency import idempotency_headers
from ..models_documents import DocumentListPage, DocumentQuery, DocumentRecord, NextNumberResponse
from .base import BaseClient


@dataclass
class DocumentsClient(BaseClient):
    document_type: DocumentType = DocumentType.SALES_INVOICE

    @property
    def base_path(self) -> str:
        return f"/{self.document_type.value}"

    def list_documents(self, filters: DocumentQuery | Mapping[str, Any] | None = None) -> DocumentListPage:
        params = None
        if filters is not None:
            query = _coerce_model(filters, DocumentQuery)
            params = query.model_dump(by_alias=True, exclude_none=True, mode="json")
        data = self._request(
            "GET",
            self.base_path,
            params=params,
            module=self.document_type.value,
            operation="list",
        )
        if not isinstance(data, dict):
            raise ValueError("Expected document list data to be a JSON object")
        return DocumentListPage.model_validate(data)

    def get_document(self, record_id: str) -> DocumentRecord:
        data = self._request(
            "GET",
            f"{self.base_path}/{record_id}",
            module=self.document_type.value,
            operation="get",
        )
        if not isinstance(data, dict):
            raise ValueError("Expected document data to be a JSON object")
        return DocumentRecord.model_validate(data)

    def create_document(
        self,
        payload: Mapping[str, Any],
        *,
        idempotency_key: str | None = None,
        context_key: str | None = None,
    ) -> DocumentRecord:
        data = self._request(
            "POST",
            self.base_path,
            json_body=dict(payload),
            headers=idempotency_headers(idempotency_key),
            module=self.document_type.value,
            operation="create",
            context_key=context_key,
            invalidate_paths=[self.base_path],
        )
        if not isinstance(data, dict):
            raise ValueError("Expected create document data to be a JSON object")
        return DocumentRecord.model_validate(data)

    def update_document(
        self,
        record_id: str,
        payload: Mapping[str, Any],
        *,
        idempotency_key: str | None = None,
        context_key: str | None = None,
    ) -> DocumentRecord:
        data = self._request(
            "PUT",
            f"{self.base_path}/{record_id}",
            json_body=dict(payload),
            headers=idempotency_headers(idempotency_key),
            module=self.document_type.value,
            operation="update",
            context_key=context_key,
            invalidate_paths=[self.base_path],
        )
        if not isinstance(data, dict):
            raise ValueError("Expected update document data to be a JSON object")
        return DocumentRecord.model_validate(data)

    def delete_document(self, record_id: str, *, context_key: str | None = None) -> None:
        self._request(
            "DELETE",
            f"{self.base_path}/{record_id}",
            module=self.document_type.value,
            operation="delete",
            context_key=context_key,
            invalidate_paths=[self.base_path],
        )

    def document_action(
        self,
        record_id: str,
        action: str,
        body: Mapping[str, Any] | None = None,
        *,
        context_key: str | None = None,
    ) -> DocumentRecord | None:
        data = self._request(
            "POST",
            f"{self.base_path}/{record_id}/{action}",
            json_body=dict(body) if body else None,
            module=self.document_type.value,
            operation=action,
            context_key=context_key,
            invalidate_paths=[self.base_path],
        )
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"Expected {action} data to be a JSON object")
        return DocumentRecord.model_validate(data)

    def next_number(self, company_id: str | int | None = None) -> NextNumberResponse:
        params = {"companyId": company_id} if company_id is not None else None
        data = self._request(
            "GET",
            f"{self.base_path}/next-number",
            params=params,
            module=self.document_type.value,
            operation="next_number",
            use_get_cache=False,
        )
        if not isinstance(data, dict):
            raise ValueError("Expected next number data to be a JSON object")
        return NextNumberResponse.model_validate(data)


def _coerce_model(value: Any, model_type: type[Any]):
    if isinstance(value, model_type):
        return value
    return model_type.model_validate(value)
