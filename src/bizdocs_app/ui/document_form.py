from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from bizdocs_sdk import (
    CatalogItem,
    Counterparty,
    DocumentActionAvailability,
    DocumentFamily,
    DocumentHeader,
    DocumentRecord,
    DocumentStateError,
    DocumentTotals,
    DocumentType,
    DocumentTypePolicy,
    JournalStatus,
    LineItemLedger,
    PaymentDetails,
    TaxOption,
    TaxSelection,
    TradeStatus,
    compute_document_totals,
    document_action_availability,
    ensure_transition,
    initial_trade_status,
    is_local_id,
    new_submission_keys,
    normalize_payment_method,
    observe_trade_status,
    parse_status,
    policy_for,
    requires_attachment_and_account,
    status_after_payment,
    validate_payment_details,
)
from bizdocs_sdk.money import ZERO, present, to_decimal
from bizdocs_sdk.payloads import build_trade_payload
from bizdocs_sdk.payment_policy import attachment_label
from bizdocs_sdk.validation import ValidationIssue, issues_to_field_errors, require_fields

from bizdocs_app.services.documents_service import DocumentsService, DocumentsServiceError
from bizdocs_app.telemetry import TelemetryLogger, build_event
from bizdocs_app.ui.components.totals_panel import TotalsPanel
from bizdocs_app.ui.shared.error_presenter import ErrorPresenter
from bizdocs_app.ui.shared.retry_panel import RetryPanel
from bizdocs_app.ui.shared.view_state import resolve_state

HEADER_FIELDS = frozenset({"company_id", "counterparty_id", "document_number", "date", "due_date", "remarks"})
_DATE_FIELDS = frozenset({"date", "due_date"})


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


@dataclass
class DocumentFormController(ABC):
    """State and lifecycle shared by every document editing surface.

    Results are plain dicts with an ``ok`` flag. Nothing here raises for
    user-facing failures; errors are kept on the controller and returned.
    """

    service: DocumentsService
    document_type: DocumentType
    company_id: str | None = None
    telemetry: TelemetryLogger | None = None
    header: DocumentHeader = field(default_factory=DocumentHeader)
    payment: PaymentDetails = field(default_factory=PaymentDetails)
    record_id: str | None = None
    number_provisional: bool = False
    number_locked: bool = False
    field_errors: dict[str, str] = field(default_factory=dict)
    error_message: str | None = None
    request_id: str | None = None
    retry_panel: RetryPanel | None = None
    offline: bool = False
    is_loading: bool = False
    is_submitting: bool = False
    mounted: bool = True
    context_key: str = field(default_factory=lambda: f"form:{uuid.uuid4().hex}")
    idempotency_key: str = field(default_factory=lambda: new_submission_keys().idempotency_key)

    @property
    def policy(self) -> DocumentTypePolicy:
        return policy_for(self.document_type)

    @property
    def status(self) -> JournalStatus | TradeStatus:
        return parse_status(self.policy.family, self.header.status)

    @property
    def is_remote(self) -> bool:
        return self.record_id is not None and not is_local_id(self.record_id)

    def start_new(self, company_id: str | int | None = None) -> dict[str, Any]:
        if company_id is not None:
            self.company_id = str(company_id)
        self.mounted = True
        try:
            issued = self.service.issue_number(self.document_type, self.company_id)
        except DocumentsServiceError as exc:
            return self._read_failure("start_new", exc)
        self.header = DocumentHeader(
            company_id=self.company_id,
            document_number=issued.value,
            date=date.today(),
        )
        self.payment = PaymentDetails()
        self.record_id = None
        self.number_provisional = issued.provisional
        self.number_locked = False
        self.offline = False
        self._clear_feedback()
        self.idempotency_key = new_submission_keys().idempotency_key
        self._reset_body()
        self._emit(
            "numbering",
            "document_number_issued",
            "start_new",
            success=True,
            context={"provisional": issued.provisional},
        )
        return {"ok": True, "document_number": issued.value, "provisional": issued.provisional}

    def load(self, record_id: str) -> dict[str, Any]:
        self.mounted = True
        self.is_loading = True
        try:
            record = self.service.get(self.document_type, record_id)
        except DocumentsServiceError as exc:
            return self._read_failure("load", exc)
        finally:
            self.is_loading = False
        self._hydrate(record)
        self._clear_feedback()
        return {"ok": True, "record_id": self.record_id, "status": self.status.value, "offline": self.offline}

    def set_header_field(self, name: str, value: Any) -> dict[str, Any]:
        if name not in HEADER_FIELDS:
            return {"ok": False, "error": f"Unknown header field: {name}"}
        if name == "document_number" and self.number_locked:
            return {"ok": False, "error": "Document number cannot change once the document is saved"}
        if name in _DATE_FIELDS and isinstance(value, str):
            try:
                value = date.fromisoformat(value) if value.strip() else None
            except ValueError:
                return {"ok": False, "error": f"Invalid date: {value}"}
        self.header = self.header.model_copy(update={name: value})
        if name == "company_id":
            self.company_id = None if value is None else str(value)
        self.field_errors.pop(name, None)
        return {"ok": True, "header": self.header.model_dump(mode="json")}

    def set_payment(
        self,
        *,
        method: str | None = None,
        account_number: str | None = None,
        attachment_ref: str | None = None,
    ) -> dict[str, Any]:
        normalized = normalize_payment_method(method)
        if method and normalized is None:
            return {"ok": False, "error": f"Unknown payment method: {method}"}
        self.payment = PaymentDetails(method=normalized, account_number=account_number, attachment_ref=attachment_ref)
        self.field_errors.pop("payment.account_number", None)
        self.field_errors.pop("payment.attachment_ref", None)
        return {"ok": True, "payment": self._render_payment()}

    def validate(self) -> dict[str, Any]:
        issues = [*self._header_issues(), *validate_payment_details(self.payment), *self._document_issues()]
        self.field_errors = issues_to_field_errors(issues)
        return {"ok": not issues, "field_errors": dict(self.field_errors), "issues": [issue.reason for issue in issues]}

    def submit(self) -> dict[str, Any]:
        if self.is_submitting:
            return {"ok": False, "error": "Submission already in progress"}
        if not self._availability().can_edit:
            return {"ok": False, "error": f"{self.status.value} documents cannot be edited"}
        validation = self.validate()
        if not validation["ok"]:
            self.error_message = validation["issues"][0]
            self._emit(
                "validation",
                "document_validation_failed",
                "submit",
                success=False,
                error_code="CLIENT_VALIDATION",
                context={"fields": sorted(self.field_errors)},
            )
            return {
                "ok": False,
                "error": self.error_message,
                "field_errors": validation["field_errors"],
                "issues": validation["issues"],
            }
        self._before_submit()
        payload = self._build_payload()
        saved_remote_id = self.record_id if self.is_remote else None
        self.is_submitting = True
        started = time.perf_counter()
        try:
            result = self.service.submit(
                self.document_type,
                payload,
                record_id=self.record_id,
                idempotency_key=self.idempotency_key,
                context_key=self.context_key,
            )
        except DocumentsServiceError as exc:
            if exc.cancelled or not self.mounted:
                return self._dropped("submit")
            return self._submit_failure(exc, started)
        finally:
            self.is_submitting = False
        if not self.mounted:
            return self._dropped("submit")
        # An offline copy of a saved document still updates that document next time.
        self.record_id = saved_remote_id if result.offline and saved_remote_id else result.record_id
        self.offline = result.offline
        if not result.offline:
            stored_number = result.record.field(self.policy.number_field)
            updates: dict[str, Any] = {}
            if stored_number:
                updates["document_number"] = str(stored_number)
            if result.record.status:
                updates["status"] = result.record.status
            self.header = self.header.model_copy(update=updates)
            self.number_locked = True
            self.number_provisional = False
        self._clear_feedback()
        self.idempotency_key = new_submission_keys().idempotency_key
        self._emit(
            "document_submit",
            "document_submitted",
            "submit",
            success=True,
            duration_ms=_elapsed_ms(started),
            context={"offline": result.offline, "source": result.source},
        )
        return {
            "ok": True,
            "record_id": self.record_id,
            "document_number": self.header.document_number,
            "offline": result.offline,
            "source": result.source,
            "navigate_to": self.policy.list_route,
        }

    def navigate_away(self) -> dict[str, Any]:
        """Detach the form; responses still in flight are dropped on arrival."""
        self.mounted = False
        version = self.service.switch_context(self.context_key)
        return {"ok": True, "context_version": version}

    def delete(self, *, confirmed: bool) -> dict[str, Any]:
        if not confirmed:
            return {"ok": False, "error": "Delete confirmation is required"}
        if self.record_id is None:
            return {"ok": False, "error": "No document loaded"}
        if self.status.value != "DRAFT":
            return {"ok": False, "error": "Only draft documents can be deleted"}
        if self.is_submitting:
            return {"ok": False, "error": "Submission already in progress"}
        self.is_submitting = True
        try:
            result = self.service.delete(self.document_type, self.record_id)
        except DocumentsServiceError as exc:
            return self._mutation_failure("delete", exc)
        finally:
            self.is_submitting = False
        self._emit(
            "document_action",
            "document_deleted",
            "delete",
            success=True,
            context={"acknowledged_locally": result.acknowledged_locally},
        )
        self.record_id = None
        self.number_locked = False
        return {
            "ok": True,
            "record_id": result.record_id,
            "remote_deleted": result.remote_deleted,
            "acknowledged_locally": result.acknowledged_locally,
            "navigate_to": self.policy.list_route,
        }

    def render(self) -> dict[str, Any]:
        state = resolve_state(
            is_loading=self.is_loading,
            error=self.error_message,
            has_data=self.record_id is not None or self._has_body(),
            offline=self.offline,
            request_id=self.request_id,
        )
        availability = self._availability()
        return {
            "document_type": self.document_type.value,
            "record_id": self.record_id,
            "header": self.header.model_dump(mode="json"),
            "status": self._observed_status().value,
            "number": {
                "value": self.header.document_number,
                "provisional": self.number_provisional,
                "locked": self.number_locked,
            },
            "payment": self._render_payment(),
            **self._render_body(),
            "field_errors": dict(self.field_errors),
            "error": self.error_message,
            "request_id": self.request_id,
            "view_state": state.render(),
            "retry": self.retry_panel.render() if self.retry_panel else None,
            "actions": {
                "can_edit": availability.can_edit,
                "can_submit": availability.can_edit and not self.is_submitting,
                "can_delete": self.record_id is not None and self.status.value == "DRAFT",
                "can_approve": availability.can_approve,
                "can_pay": availability.can_pay,
                "can_cancel": availability.can_cancel,
                "can_post": availability.can_post,
                "can_void": availability.can_void,
            },
            "guards": {
                "disable_while_submitting": self.is_submitting,
                "double_submit_protection": True,
                "delete_requires_confirmation": True,
            },
        }

    def _run_action(
        self,
        action: str,
        target: JournalStatus | TradeStatus | None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if self.record_id is None:
            return {"ok": False, "error": "No document loaded"}
        if not self.is_remote:
            return {"ok": False, "error": "Document has not reached the server yet"}
        if self.is_submitting:
            return {"ok": False, "error": "Submission already in progress"}
        if target is not None:
            try:
                ensure_transition(self.status, target)
            except DocumentStateError as exc:
                return {"ok": False, "error": str(exc)}
        self.is_submitting = True
        try:
            record = self.service.action(
                self.document_type,
                self.record_id,
                action,
                body,
                context_key=self.context_key,
            )
        except DocumentsServiceError as exc:
            if exc.cancelled or not self.mounted:
                return self._dropped(action)
            return self._mutation_failure(action, exc)
        finally:
            self.is_submitting = False
        if not self.mounted:
            return self._dropped(action)
        if record is not None and record.status:
            new_status = parse_status(self.policy.family, record.status).value
        elif target is not None:
            new_status = target.value
        else:
            new_status = self.status.value
        self.header = self.header.model_copy(update={"status": new_status})
        self._clear_feedback()
        self._emit("document_action", f"document_{action}", action, success=True, context={"status": new_status})
        return {"ok": True, "action": action, "status": new_status}

    def _hydrate(self, record: DocumentRecord) -> None:
        policy = self.policy
        counterparty = record.field(policy.counterparty_field) if policy.counterparty_field else None
        self.header = DocumentHeader(
            company_id=record.company_id if record.company_id is not None else self.company_id,
            counterparty_id=counterparty,
            document_number=str(record.field(policy.number_field) or ""),
            date=record.date,
            due_date=record.due_date,
            status=record.status or "DRAFT",
            remarks=record.field("remarks"),
        )
        self.payment = PaymentDetails(
            method=normalize_payment_method(record.field("paymentMethod")),
            account_number=record.field("accountNumber"),
            attachment_ref=record.field("receiptImage"),
        )
        remote_id = record.field("remoteId")
        self.record_id = str(remote_id) if remote_id else record.record_id
        self.offline = bool(record.field("pendingSync", False))
        self.number_locked = self.is_remote
        self.number_provisional = False
        self._hydrate_body(record)

    def _header_issues(self) -> list[ValidationIssue]:
        values = self.header.model_dump()
        return require_fields(values, {"document_number": "Document number", "date": "Date"})

    def _submit_failure(self, exc: DocumentsServiceError, started: float) -> dict[str, Any]:
        response = self._mutation_failure("submit", exc, duration_ms=_elapsed_ms(started))
        if exc.duplicate_number:
            self.field_errors["document_number"] = exc.message
        if exc.duplicate_number and not self.number_locked:
            try:
                issued = self.service.reissue_number(self.document_type, self.company_id, self.header.document_number)
            except DocumentsServiceError:
                return response
            self.header = self.header.model_copy(update={"document_number": issued.value})
            self.number_provisional = issued.provisional
            self.idempotency_key = new_submission_keys().idempotency_key
            self._emit(
                "numbering",
                "document_number_reissued",
                "submit",
                success=True,
                context={"provisional": issued.provisional},
            )
            response["reissued_number"] = issued.value
        response["field_errors"] = dict(self.field_errors)
        return response

    def _mutation_failure(self, action: str, exc: DocumentsServiceError, duration_ms: int | None = None) -> dict[str, Any]:
        presented = ErrorPresenter().present(
            message=exc.message,
            details=exc.details,
            request_id=exc.request_id,
            action=f"{self.document_type.value}.{action}",
            code=exc.code,
            allow_retry=False,
        )
        self.error_message = presented.user_message
        self.request_id = exc.request_id
        self._emit(
            "document_submit" if action == "submit" else "document_action",
            f"document_{action}_failed",
            action,
            success=False,
            error_code=presented.code,
            duration_ms=duration_ms,
        )
        return {
            "ok": False,
            "error": presented.user_message,
            "request_id": exc.request_id,
            "details": presented.details,
            "category": presented.category,
            "not_applied": True,
        }

    def _read_failure(self, operation: str, exc: DocumentsServiceError) -> dict[str, Any]:
        presented = ErrorPresenter().present(
            message=exc.message,
            details=exc.details,
            request_id=exc.request_id,
            action=f"{self.document_type.value}.{operation}",
            code=exc.code,
            allow_retry=True,
        )
        self.error_message = presented.user_message
        self.request_id = exc.request_id
        self.retry_panel = RetryPanel(
            operation=operation,
            is_mutation=False,
            has_transient_error=presented.safe_to_retry,
            request_id=exc.request_id,
        )
        self._emit("error", f"document_{operation}_failed", operation, success=False, error_code=presented.code)
        return {
            "ok": False,
            "error": presented.user_message,
            "request_id": exc.request_id,
            "category": presented.category,
            "retry": self.retry_panel.render(),
        }

    def _dropped(self, action: str) -> dict[str, Any]:
        return {"ok": False, "dropped": True, "action": action}

    def _clear_feedback(self) -> None:
        self.field_errors = {}
        self.error_message = None
        self.request_id = None
        self.retry_panel = None

    def _availability(self) -> DocumentActionAvailability:
        return document_action_availability(self.status, persisted=self.is_remote, balanced=self._balanced())

    def _observed_status(self) -> JournalStatus | TradeStatus:
        return self.status

    def _render_payment(self) -> dict[str, Any]:
        method = self.payment.method
        return {
            "method": method.value if method else None,
            "requires_attachment_and_account": requires_attachment_and_account(method),
            "attachment_label": attachment_label(method),
            "has_account_number": bool(self.payment.account_number),
            "has_attachment": bool(self.payment.attachment_ref),
        }

    def _emit(
        self,
        category: str,
        name: str,
        action: str,
        *,
        success: bool | None = None,
        error_code: str | None = None,
        duration_ms: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if self.telemetry is None:
            return
        self.telemetry.emit(
            build_event(
                category=category,
                name=name,
                document_type=self.document_type.value,
                action=action,
                request_id=self.request_id,
                duration_ms=duration_ms,
                success=success,
                error_code=error_code,
                context=context,
            )
        )

    def _balanced(self) -> bool:
        return True

    @abstractmethod
    def _has_body(self) -> bool: ...

    @abstractmethod
    def _reset_body(self) -> None: ...

    @abstractmethod
    def _hydrate_body(self, record: DocumentRecord) -> None: ...

    @abstractmethod
    def _document_issues(self) -> list[ValidationIssue]: ...

    def _before_submit(self) -> None:
        return None

    @abstractmethod
    def _build_payload(self) -> dict[str, Any]: ...

    @abstractmethod
    def _render_body(self) -> dict[str, Any]: ...


@dataclass
class TradeDocumentForm(DocumentFormController):
    """Invoices, bills and returns: priced lines, one tax, discount and settlement."""

    ledger: LineItemLedger = field(default_factory=LineItemLedger)
    tax: TaxSelection | None = None
    discount: Decimal = ZERO
    amount: Decimal = ZERO
    items: list[CatalogItem] = field(default_factory=list)
    taxes: list[TaxOption] = field(default_factory=list)
    counterparties: list[Counterparty] = field(default_factory=list)
    totals: DocumentTotals | None = None
    original_invoice: str | None = None
    return_reason: str | None = None

    def __post_init__(self) -> None:
        if self.policy.family != DocumentFamily.TRADE:
            raise ValueError(f"{self.document_type.value} is not a trade document")
        self.ledger.subscribe(lambda _ledger: self._recompute())
        self._recompute()

    @property
    def counterparty_kind(self) -> str | None:
        if self.policy.counterparty_field == "customerId":
            return "customer"
        if self.policy.counterparty_field == "vendorId":
            return "vendor"
        return None

    def load_catalogs(self) -> dict[str, Any]:
        self.is_loading = True
        try:
            snapshot = self.service.load_catalog(
                self.document_type,
                self.company_id,
                counterparty_kind=self.counterparty_kind,
            )
        except DocumentsServiceError as exc:
            return self._read_failure("load_catalogs", exc)
        finally:
            self.is_loading = False
        self.items = snapshot.items
        self.taxes = snapshot.taxes
        self.counterparties = snapshot.counterparties
        side = "sale" if self.counterparty_kind == "customer" else "purchase"
        rates = {str(item.id): item.rate_for(side) for item in self.items}
        self.ledger.set_catalog({key: rate for key, rate in rates.items() if rate is not None})
        self.retry_panel = None
        self.error_message = None
        return {
            "ok": True,
            "items": [{"id": str(item.id), "label": item.label} for item in self.items],
            "taxes": [{"id": str(tax.id), "label": tax.label, "rate_percent": tax.rate_percent} for tax in self.taxes],
            "counterparties": [{"id": str(party.id), "label": party.label} for party in self.counterparties],
        }

    def select_tax(self, tax_id: str | int | None, rate_percent: Any = None) -> dict[str, Any]:
        if tax_id is None or tax_id == "":
            self.tax = None
        elif rate_percent is not None:
            self.tax = TaxSelection(tax_id=str(tax_id), rate_percent=to_decimal(rate_percent))
        else:
            option = next((tax for tax in self.taxes if str(tax.id) == str(tax_id)), None)
            if option is None:
                return {"ok": False, "error": f"Unknown tax: {tax_id}"}
            self.tax = TaxSelection(tax_id=str(option.id), rate_percent=option.rate_percent)
        self._recompute()
        return {"ok": True, "totals": self._render_totals()}

    def set_discount(self, value: Any) -> dict[str, Any]:
        discount = to_decimal(value)
        if discount < 0:
            self.field_errors["discount"] = "Discount cannot be negative"
            return {"ok": False, "error": self.field_errors["discount"]}
        self.discount = discount
        self.field_errors.pop("discount", None)
        self._recompute()
        return {"ok": True, "totals": self._render_totals()}

    def set_amount(self, value: Any) -> dict[str, Any]:
        label = "Refund amount" if self.policy.is_refund else "Paid amount"
        amount = to_decimal(value)
        if amount < 0:
            self.field_errors["amount"] = f"{label} cannot be negative"
            return {"ok": False, "error": self.field_errors["amount"]}
        self.amount = amount
        self.field_errors.pop("amount", None)
        self._recompute()
        return {"ok": True, "totals": self._render_totals()}

    def add_line(self) -> dict[str, Any]:
        line = self.ledger.add_line()
        return {"ok": True, "line_id": line.id, "lines": self._render_lines(), "totals": self._render_totals()}

    def update_line(self, line_id: str, field_name: str, value: Any) -> dict[str, Any]:
        self.ledger.update_line(line_id, field_name, value)
        return {"ok": True, "lines": self._render_lines(), "totals": self._render_totals()}

    def remove_line(self, line_id: str) -> dict[str, Any]:
        self.ledger.remove_line(line_id)
        return {"ok": True, "lines": self._render_lines(), "totals": self._render_totals()}

    def set_return_details(self, *, original_invoice: Any = None, return_reason: str | None = None) -> dict[str, Any]:
        if not self.policy.is_refund:
            return {"ok": False, "error": f"{self.document_type.value} does not carry return details"}
        self.original_invoice = None if original_invoice in (None, "") else str(original_invoice)
        self.return_reason = return_reason or None
        return {"ok": True, "return_details": self._render_return_details()}

    def approve(self) -> dict[str, Any]:
        return self._run_action("approve", TradeStatus(self.policy.issued_status))

    def mark_paid(self, amount: Any = None) -> dict[str, Any]:
        if self.policy.is_refund:
            return self._run_action("complete", TradeStatus.PAID)
        payment = to_decimal(amount) if amount is not None else (self.totals.balance or ZERO)
        if payment <= 0:
            return {"ok": False, "error": "Payment amount must be greater than zero"}
        issues = validate_payment_details(self.payment)
        if issues:
            self.field_errors.update(issues_to_field_errors(issues))
            return {"ok": False, "error": issues[0].reason, "field_errors": dict(self.field_errors)}
        balance_after = (self.totals.balance or ZERO) - payment
        try:
            target = status_after_payment(self.status, balance_after)
        except DocumentStateError as exc:
            return {"ok": False, "error": str(exc)}
        body: dict[str, Any] = {"amount": str(payment)}
        if self.payment.method is not None:
            body["paymentMethod"] = self.payment.method.value
        result = self._run_action("pay", target if target != self.status else None, body)
        if result.get("ok"):
            self.amount += payment
            self._recompute()
            result["balance"] = present(self.totals.balance)
        return result

    def cancel_document(self, *, confirmed: bool) -> dict[str, Any]:
        if not confirmed:
            return {"ok": False, "error": "Cancel confirmation is required"}
        return self._run_action("cancel", TradeStatus.CANCELLED)

    def _recompute(self) -> None:
        self.totals = compute_document_totals(self.ledger, self.tax, self.discount, self.amount, self.policy)

    def _has_body(self) -> bool:
        return bool(self.ledger.lines)

    def _reset_body(self) -> None:
        self.tax = None
        self.original_invoice = None
        self.return_reason = None
        self.discount = ZERO
        self.amount = ZERO
        self.ledger.load([])

    def _hydrate_body(self, record: DocumentRecord) -> None:
        tax_id = record.field("taxId")
        self.tax = None
        if tax_id not in (None, ""):
            option = next((tax for tax in self.taxes if str(tax.id) == str(tax_id)), None)
            if option is not None:
                rate = option.rate_percent
            else:
                gross = to_decimal(record.field("grossAmount"))
                rate = to_decimal(record.field("taxAmount")) * 100 / gross if gross else ZERO
            self.tax = TaxSelection(tax_id=str(tax_id), rate_percent=rate)
        self.discount = to_decimal(record.field("discount"))
        self.amount = to_decimal(record.field(self.policy.settlement_field or "paidAmount"))
        self.ledger.load(record.lines)
        if self.policy.is_refund:
            original = record.field("originalInvoice")
            self.original_invoice = None if original in (None, "") else str(original)
            self.return_reason = record.field("returnReason") or None

    def _document_issues(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if self.counterparty_kind is not None:
            label = "Customer" if self.counterparty_kind == "customer" else "Vendor"
            issues.extend(require_fields({"counterparty_id": self.header.counterparty_id}, {"counterparty_id": label}))
        if not self.ledger.priced_lines():
            issues.append(ValidationIssue(field="lines", reason="At least one line item is required"))
        for idx, line in enumerate(self.ledger.lines):
            if line.item_reference and line.quantity <= 0:
                issues.append(
                    ValidationIssue(field="quantity", reason="Quantity must be greater than zero", row_index=idx)
                )
        if self.discount < 0:
            issues.append(ValidationIssue(field="discount", reason="Discount cannot be negative"))
        if self.amount < 0:
            issues.append(ValidationIssue(field="amount", reason="Amount cannot be negative"))
        return issues

    def _before_submit(self) -> None:
        if not self.is_remote and self.status == TradeStatus.DRAFT:
            status = initial_trade_status(self.totals.balance, self.amount)
            self.header = self.header.model_copy(update={"status": status.value})

    def _build_payload(self) -> dict[str, Any]:
        return build_trade_payload(
            self.policy,
            header=self.header,
            ledger=self.ledger,
            tax=self.tax,
            totals=self.totals,
            payment=self.payment,
            extra=self._return_fields(),
        )

    def _observed_status(self) -> TradeStatus:
        return observe_trade_status(self.status, due_date=self.header.due_date, balance=self.totals.balance)

    def _render_lines(self) -> list[dict[str, Any]]:
        return [
            {
                "id": line.id,
                "item_reference": line.item_reference,
                "description": line.description,
                "quantity": line.quantity,
                "unit_rate": line.unit_rate,
                "amount": present(line.computed_amount),
            }
            for line in self.ledger.lines
        ]

    def _return_fields(self) -> dict[str, Any] | None:
        if not self.policy.is_refund:
            return None
        return {"originalInvoice": self.original_invoice, "returnReason": self.return_reason}

    def _render_return_details(self) -> dict[str, Any]:
        return {"original_invoice": self.original_invoice, "return_reason": self.return_reason}

    def _render_totals(self) -> dict[str, Any]:
        return TotalsPanel(self.totals, is_refund=self.policy.is_refund).render()

    def _render_body(self) -> dict[str, Any]:
        return {
            "lines": self._render_lines(),
            "tax": {"tax_id": self.tax.tax_id, "rate_percent": self.tax.rate_percent} if self.tax else None,
            "totals": self._render_totals(),
            "return_details": self._render_return_details() if self.policy.is_refund else None,
        }
