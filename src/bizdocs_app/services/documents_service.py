from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from bizdocs_sdk import (
    ApiSession,
    CatalogItem,
    Counterparty,
    DeleteResult,
    DocumentListResult,
    DocumentNumberConflictError,
    DocumentQuery,
    DocumentRecord,
    DocumentType,
    IssuedNumber,
    PersistResult,
    TaxOption,
    new_submission_keys,
    to_user_facing_error,
)
from bizdocs_sdk.exceptions import ApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentsServiceError(RuntimeError):
    message: str
    details: str | None = None
    request_id: str | None = None
    code: str | None = None
    duplicate_number: bool = False
    cancelled: bool = False

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class CatalogSnapshot:
    items: list[CatalogItem]
    taxes: list[TaxOption]
    counterparties: list[Counterparty]


class DocumentsService:
    def __init__(self, session: ApiSession) -> None:
        self.session = session
        self.gateway = session.persistence_gateway()
        self.issuer = session.number_issuer()

    def issue_number(self, document_type: DocumentType, company_id: str | int | None) -> IssuedNumber:
        try:
            issued = self.issuer.next(document_type, company_id)
        except Exception as exc:
            raise self._normalize_error(exc) from exc
        logger.info(
            "document_number_issued",
            extra={"document_type": document_type.value, "provisional": issued.provisional},
        )
        return issued

    def reissue_number(self, document_type: DocumentType, company_id: str | int | None, rejected: str) -> IssuedNumber:
        try:
            return self.issuer.reissue(document_type, company_id, rejected)
        except Exception as exc:
            raise self._normalize_error(exc) from exc

    def load_catalog(
        self,
        document_type: DocumentType,
        company_id: str | int | None = None,
        *,
        counterparty_kind: str | None = None,
    ) -> CatalogSnapshot:
        client = self.session.catalog_client()
        try:
            items = client.list_items(company_id)
            taxes = client.list_taxes(company_id)
            if counterparty_kind == "customer":
                counterparties = client.list_customers(company_id)
            elif counterparty_kind == "vendor":
                counterparties = client.list_vendors(company_id)
            else:
                counterparties = []
        except Exception as exc:
            logger.warning("catalog_load_failure", extra={"document_type": document_type.value})
            raise self._normalize_error(exc) from exc
        return CatalogSnapshot(items=items, taxes=taxes, counterparties=counterparties)

    def get(self, document_type: DocumentType, record_id: str) -> DocumentRecord:
        try:
            return self.gateway.get(document_type, record_id)
        except KeyError as exc:
            raise DocumentsServiceError(message="Document not found", code="NOT_FOUND") from exc
        except Exception as exc:
            raise self._normalize_error(exc) from exc

    def list(
        self,
        document_type: DocumentType,
        filters: DocumentQuery | Mapping[str, Any] | None = None,
    ) -> DocumentListResult:
        try:
            return self.gateway.list(document_type, filters)
        except Exception as exc:
            raise self._normalize_error(exc) from exc

    def submit(
        self,
        document_type: DocumentType,
        payload: Mapping[str, Any],
        *,
        record_id: str | None = None,
        idempotency_key: str | None = None,
        context_key: str | None = None,
    ) -> PersistResult:
        key = idempotency_key or new_submission_keys().idempotency_key
        logger.info(
            "document_submit_attempt",
            extra={"document_type": document_type.value, "record_id": record_id},
        )
        try:
            result = self.gateway.submit(
                document_type,
                payload,
                record_id=record_id,
                idempotency_key=key,
                context_key=context_key,
            )
        except Exception as exc:
            logger.warning("document_submit_failure", extra={"document_type": document_type.value})
            raise self._normalize_error(exc) from exc
        return result

    def delete(self, document_type: DocumentType, record_id: str) -> DeleteResult:
        try:
            return self.gateway.delete(document_type, record_id)
        except Exception as exc:
            raise self._normalize_error(exc) from exc

    def action(
        self,
        document_type: DocumentType,
        record_id: str,
        action: str,
        body: Mapping[str, Any] | None = None,
        *,
        context_key: str | None = None,
    ) -> DocumentRecord | None:
        logger.info(
            "document_action_attempt",
            extra={"document_type": document_type.value, "record_id": record_id, "action": action},
        )
        try:
            return self.gateway.action(document_type, record_id, action, body, context_key=context_key)
        except Exception as exc:
            raise self._normalize_error(exc) from exc

    def switch_context(self, context_key: str) -> int:
        return self.session.switch_context(context_key)

    def context_version(self, context_key: str) -> int:
        return self.session.get_context_version(context_key)

    @staticmethod
    def _normalize_error(exc: Exception) -> DocumentsServiceError:
        if isinstance(exc, DocumentsServiceError):
            return exc
        if isinstance(exc, ApiError):
            presented = to_user_facing_error(exc)
            return DocumentsServiceError(
                message=presented.message,
                details=presented.details,
                request_id=exc.request_id,
                code=exc.code,
                duplicate_number=isinstance(exc, DocumentNumberConflictError),
                cancelled=exc.code == "REQUEST_CANCELLED",
            )
        return DocumentsServiceError(message=str(exc) or "Documents client error")
