from __future__ import annotations

from dataclasses import dataclass, field

from .clients.catalog_client import CatalogClient
from .clients.documents_client import DocumentsClient
from .config import ClientConfig
from .document_types import DocumentType
from .http_client import HttpClient
from .local_store import LocalDocumentStore
from .numbering import DocumentNumberIssuer
from .persistence import PersistenceGateway
from .tracing import RequestTrace

SESSION_COOKIE_NAME = "session"


@dataclass
class ApiSession:
    """An authenticated client: session cookie first, bearer token as fallback."""

    config: ClientConfig
    token: str | None = None
    session_cookie: str | None = None
    company_id: str | None = None
    trace: RequestTrace | None = None
    store: LocalDocumentStore | None = None
    http: HttpClient | None = None
    _document_clients: dict[DocumentType, DocumentsClient] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.trace = self.trace or RequestTrace()
        self.store = self.store or LocalDocumentStore(base_dir=self.config.resolved_store_dir())
        if self.http is None:
            cookies = {SESSION_COOKIE_NAME: self.session_cookie} if self.session_cookie else None
            self.http = HttpClient(config=self.config, trace=self.trace, cookies=cookies)

    def documents_client(self, document_type: DocumentType) -> DocumentsClient:
        client = self._document_clients.get(document_type)
        if client is None:
            client = DocumentsClient(
                http=self.http,
                access_token=self.token,
                company_id=self.company_id,
                document_type=document_type,
            )
            self._document_clients[document_type] = client
        return client

    def catalog_client(self) -> CatalogClient:
        return CatalogClient(http=self.http, access_token=self.token, company_id=self.company_id)

    def persistence_gateway(self) -> PersistenceGateway:
        return PersistenceGateway(
            client_for=self.documents_client,
            store=self.store,
            offline_fallback=self.config.offline_fallback,
        )

    def number_issuer(self) -> DocumentNumberIssuer:
        return DocumentNumberIssuer(source_for=self.documents_client, store=self.store)

    def switch_context(self, context_key: str) -> int:
        return self.http.switch_context(context_key)

    def get_context_version(self, context_key: str) -> int:
        return self.http.get_context_version(context_key)

    def clear(self) -> None:
        self.token = None
        self.session_cookie = None
        self._document_clients.clear()
        if self.http is not None and self.http.session is not None:
            self.http.session.cookies.clear()
        if self.http is not None:
            self.http.clear_cache()
