from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping

from .clients.documents_client import DocumentsClient
from .document_state import ACTION_FAMILIES
from .document_types import DocumentType, policy_for
from .exceptions import OFFLINE_ERRORS, ApiError
from .local_store import LocalDocumentStore, is_local_id
from .models_documents import DocumentListPage, DocumentQuery, DocumentRecord

logger = logging.getLogger(__name__)

PersistSource = Literal["remote", "local"]


@dataclass(frozen=True)
class PersistResult:
    record: DocumentRecord
    source: PersistSource
    offline: bool
    error_code: str | None = None

    @property
    def record_id(self) -> str | None:
        return self.record.record_id


@dataclass(frozen=True)
class DeleteResult:
    record_id: str
    remote_deleted: bool
    local_removed: bool
    acknowledged_locally: bool


@dataclass(frozen=True)
class DocumentListResult:
    page: DocumentListPage
    pending_local: list[DocumentRecord] = field(default_factory=list)

    @property
    def rows(self) -> list[DocumentRecord]:
        return [*self.pending_local, *self.page.data]


@dataclass
class PersistenceGateway:
    """Remote-first document persistence with a durable local fallback.

    Writes that fail on the network or with a 5xx are kept in the local store
    so the user's work survives; those snapshots stay invisible to the service
    until something replays ``pending()``. Rejections from the service (4xx)
    are never absorbed.
    """

    client_for: Callable[[DocumentType], DocumentsClient]
    store: LocalDocumentStore
    offline_fallback: bool = True

    def submit(
        self,
        document_type: DocumentType,
        payload: Mapping[str, Any],
        *,
        record_id: str | None = None,
        idempotency_key: str | None = None,
        context_key: str | None = None,
    ) -> PersistResult:
        policy = policy_for(document_type)
        client = self.client_for(document_type)
        remote_id = None if is_local_id(record_id) else record_id
        try:
            if remote_id:
                record = client.update_document(
                    remote_id, payload, idempotency_key=idempotency_key, context_key=context_key
                )
            else:
                record = client.create_document(payload, idempotency_key=idempotency_key, context_key=context_key)
        except OFFLINE_ERRORS as exc:
            if exc.code == "REQUEST_CANCELLED" or not self.offline_fallback:
                raise
            local_id = record_id if is_local_id(record_id) else None
            if remote_id:
                existing = self._pending_for_remote(policy.store_key, remote_id)
                local_id = str(existing["id"]) if existing else None
            snapshot = self.store.upsert(
                policy.store_key,
                {**payload, "pendingSync": True, "remoteId": remote_id},
                record_id=local_id,
            )
            logger.warning(
                "document_persisted_offline",
                extra={"document_type": document_type.value, "local_id": snapshot["id"], "error_code": exc.code},
            )
            return PersistResult(
                record=DocumentRecord.model_validate(snapshot),
                source="local",
                offline=True,
                error_code=exc.code,
            )
        # The offline copy has now reached the service.
        if is_local_id(record_id):
            self.store.delete(policy.store_key, str(record_id))
        elif remote_id:
            cached = self._pending_for_remote(policy.store_key, remote_id)
            if cached is not None:
                self.store.delete(policy.store_key, str(cached["id"]))
        logger.info(
            "document_persisted",
            extra={"document_type": document_type.value, "record_id": record.record_id},
        )
        return PersistResult(record=record, source="remote", offline=False)

    def get(self, document_type: DocumentType, record_id: str) -> DocumentRecord:
        policy = policy_for(document_type)
        if is_local_id(record_id):
            snapshot = self.store.get(policy.store_key, record_id)
            if snapshot is None:
                raise KeyError(f"No offline {document_type.value} snapshot {record_id}")
            return DocumentRecord.model_validate(snapshot)
        try:
            return self.client_for(document_type).get_document(record_id)
        except OFFLINE_ERRORS:
            cached = self._pending_for_remote(policy.store_key, record_id)
            if cached is None:
                raise
            logger.info(
                "document_read_from_local_store",
                extra={"document_type": document_type.value, "record_id": record_id},
            )
            return DocumentRecord.model_validate(cached)

    def list(
        self,
        document_type: DocumentType,
        filters: DocumentQuery | Mapping[str, Any] | None = None,
    ) -> DocumentListResult:
        page = self.client_for(document_type).list_documents(filters)
        return DocumentListResult(page=page, pending_local=self.pending(document_type))

    def pending(self, document_type: DocumentType) -> list[DocumentRecord]:
        policy = policy_for(document_type)
        return [DocumentRecord.model_validate(row) for row in self.store.list(policy.store_key)]

    def delete(self, document_type: DocumentType, record_id: str) -> DeleteResult:
        policy = policy_for(document_type)
        if is_local_id(record_id):
            removed = self.store.delete(policy.store_key, record_id)
            return DeleteResult(record_id, remote_deleted=False, local_removed=removed, acknowledged_locally=True)
        try:
            self.client_for(document_type).delete_document(record_id)
        except OFFLINE_ERRORS as exc:
            if exc.code == "REQUEST_CANCELLED":
                raise
            cached = self._pending_for_remote(policy.store_key, record_id)
            removed = bool(cached) and self.store.delete(policy.store_key, str(cached["id"]))
            logger.warning(
                "document_delete_acknowledged_locally",
                extra={"document_type": document_type.value, "record_id": record_id, "error_code": exc.code},
            )
            return DeleteResult(record_id, remote_deleted=False, local_removed=removed, acknowledged_locally=True)
        cached = self._pending_for_remote(policy.store_key, record_id)
        if cached is not None:
            self.store.delete(policy.store_key, str(cached["id"]))
        return DeleteResult(record_id, remote_deleted=True, local_removed=cached is not None, acknowledged_locally=False)

    def action(
        self,
        document_type: DocumentType,
        record_id: str,
        action: str,
        body: Mapping[str, Any] | None = None,
        *,
        context_key: str | None = None,
    ) -> DocumentRecord | None:
        policy = policy_for(document_type)
        if ACTION_FAMILIES.get(action) != policy.family:
            raise ValueError(f"Action {action!r} does not apply to {document_type.value}")
        if is_local_id(record_id):
            raise ApiError(
                code="OFFLINE_RECORD",
                message="Document has not reached the server yet",
                details={"record_id": record_id},
                request_id=None,
                status_code=0,
            )
        return self.client_for(document_type).document_action(record_id, action, body, context_key=context_key)

    def _pending_for_remote(self, store_key: str, remote_id: str) -> dict[str, Any] | None:
        for row in self.store.list(store_key):
            if str(row.get("remoteId")) == str(remote_id):
                return row
        return None
