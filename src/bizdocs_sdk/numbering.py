from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Protocol

from .document_types import DocumentType, policy_for
from .exceptions import OFFLINE_ERRORS
from .local_store import LocalDocumentStore
from .models_documents import NextNumberResponse

logger = logging.getLogger(__name__)


class NumberSource(Protocol):
    def next_number(self, company_id: str | int | None = None) -> NextNumberResponse: ...


@dataclass(frozen=True)
class IssuedNumber:
    value: str
    provisional: bool


@dataclass
class DocumentNumberIssuer:
    """Hands out document numbers.

    The service counter is authoritative. When it cannot be reached a
    provisional number is derived locally from the UTC clock and a persisted
    per-scope sequence, so drafting is never blocked. Provisional numbers can
    collide across offline clients; the create call decides.
    """

    source_for: Callable[[DocumentType], NumberSource]
    store: LocalDocumentStore
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(timezone.utc))

    def next(self, document_type: DocumentType, company_id: str | int | None = None) -> IssuedNumber:
        try:
            response = self.source_for(document_type).next_number(company_id)
        except OFFLINE_ERRORS as exc:
            logger.warning(
                "document_number_fallback",
                extra={"document_type": document_type.value, "error_code": exc.code},
            )
            return self._provisional(document_type, company_id)
        value = response.value.strip()
        if not value:
            logger.warning("document_number_empty", extra={"document_type": document_type.value})
            return self._provisional(document_type, company_id)
        return IssuedNumber(value=value, provisional=False)

    def reissue(
        self,
        document_type: DocumentType,
        company_id: str | int | None,
        rejected: str,
    ) -> IssuedNumber:
        logger.info(
            "document_number_reissue",
            extra={"document_type": document_type.value, "rejected_number": rejected},
        )
        issued = self.next(document_type, company_id)
        if issued.value == rejected:
            # Counter answered with the number it just rejected; fall back locally.
            return self._provisional(document_type, company_id)
        return issued

    def _provisional(self, document_type: DocumentType, company_id: str | int | None) -> IssuedNumber:
        policy = policy_for(document_type)
        scope = f"{document_type.value}:{company_id if company_id is not None else '-'}"
        sequence = self.store.next_sequence(scope)
        stamp = self.clock().strftime("%Y%m%d%H%M%S")
        return IssuedNumber(value=f"{policy.number_prefix}-{stamp}-{sequence:04d}", provisional=True)
