from .clients import CatalogClient, DocumentsClient
from .config import ClientConfig, ConfigError, load_config
from .document_state import (
    DocumentActionAvailability,
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
from .document_types import DocumentFamily, DocumentType, DocumentTypePolicy, policy_for
from .exceptions import (
    ApiError,
    ConflictError,
    DocumentNumberConflictError,
    DocumentStateError,
    EnvelopeRejectedError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .http_client import HttpClient
from .idempotency import SubmissionKeys, new_submission_keys
from .journal import JournalLine, JournalLines, JournalTotals, imbalance, is_balanced, journal_totals, validate_journal_entry
from .ledger import LineItem, LineItemLedger
from .local_store import LocalDocumentStore, is_local_id
from .models_documents import (
    CatalogItem,
    Counterparty,
    DocumentHeader,
    DocumentListPage,
    DocumentQuery,
    DocumentRecord,
    NextNumberResponse,
    TaxOption,
)
from .numbering import DocumentNumberIssuer, IssuedNumber
from .payment_policy import (
    PaymentDetails,
    PaymentMethod,
    normalize_payment_method,
    requires_attachment_and_account,
    validate_payment_details,
)
from .persistence import DeleteResult, DocumentListResult, PersistenceGateway, PersistResult
from .session import ApiSession
from .totals import DocumentTotals, TaxSelection, compute_document_totals, compute_tax_amount, resolve_totals
from .tracing import RequestTrace
from .ui_errors import UserFacingError, to_user_facing_error
from .validation import ClientValidationError, ValidationIssue

__all__ = [
    "ApiError",
    "ApiSession",
    "CatalogClient",
    "CatalogItem",
    "ClientConfig",
    "ClientValidationError",
    "ConfigError",
    "ConflictError",
    "Counterparty",
    "DeleteResult",
    "DocumentActionAvailability",
    "DocumentFamily",
    "DocumentHeader",
    "DocumentListPage",
    "DocumentListResult",
    "DocumentNumberConflictError",
    "DocumentNumberIssuer",
    "DocumentQuery",
    "DocumentRecord",
    "DocumentStateError",
    "DocumentTotals",
    "DocumentType",
    "DocumentTypePolicy",
    "DocumentsClient",
    "EnvelopeRejectedError",
    "ForbiddenError",
    "HttpClient",
    "IssuedNumber",
    "JournalLine",
    "JournalLines",
    "JournalStatus",
    "JournalTotals",
    "LineItem",
    "LineItemLedger",
    "LocalDocumentStore",
    "NextNumberResponse",
    "NotFoundError",
    "PaymentDetails",
    "PaymentMethod",
    "PersistResult",
    "PersistenceGateway",
    "RequestTrace",
    "ServerError",
    "SubmissionKeys",
    "TaxOption",
    "TaxSelection",
    "TradeStatus",
    "TransportError",
    "UnauthorizedError",
    "UserFacingError",
    "ValidationError",
    "ValidationIssue",
    "can_transition",
    "compute_document_totals",
    "compute_tax_amount",
    "document_action_availability",
    "ensure_transition",
    "imbalance",
    "initial_trade_status",
    "is_balanced",
    "is_local_id",
    "journal_totals",
    "load_config",
    "new_submission_keys",
    "normalize_payment_method",
    "observe_trade_status",
    "parse_status",
    "policy_for",
    "requires_attachment_and_account",
    "resolve_totals",
    "status_after_payment",
    "to_user_facing_error",
    "validate_journal_entry",
    "validate_payment_details",
]
