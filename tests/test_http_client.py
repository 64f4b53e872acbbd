from __future__ import annotations

import pytest
import requests
import responses

from bizdocs_sdk.config import ClientConfig
from bizdocs_sdk.exceptions import DocumentNumberConflictError, EnvelopeRejectedError, ServerError, TransportError
from bizdocs_sdk.http_client import HttpClient, unwrap_envelope
from bizdocs_sdk.tracing import RequestTrace

BASE_URL = "https://api.example.com"


def _client(config: ClientConfig, **kwargs) -> HttpClient:
    return HttpClient(config, trace=RequestTrace(), **kwargs)


def test_unwrap_envelope_passes_plain_bodies_through() -> None:
    assert unwrap_envelope({"id": 1}, status_code=200, request_id=None) == {"id": 1}
    assert unwrap_envelope([1, 2], status_code=200, request_id=None) == [1, 2]


def test_unwrap_envelope_returns_data() -> None:
    body = {"success": True, "message": "ok", "data": {"data": [], "total": 0}}
    assert unwrap_envelope(body, status_code=200, request_id=None) == {"data": [], "total": 0}


@responses.activate
def test_success_false_on_2xx_is_a_rejection(config: ClientConfig) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/sales-invoices",
        json={"success": False, "message": "Customer is blocked"},
        status=200,
    )
    http = _client(config)

    with pytest.raises(EnvelopeRejectedError) as excinfo:
        http.request("POST", "/sales-invoices", json_body={})

    assert excinfo.value.message == "Customer is blocked"
    assert http.last_operation is not None
    assert http.last_operation.result == "rejected"


@responses.activate
def test_duplicate_number_status_maps_to_conflict(config: ClientConfig) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/sales-invoices",
        json={"success": False, "code": "DUPLICATE_DOCUMENT_NUMBER", "message": "Invoice number already exists"},
        status=409,
    )
    http = _client(config)

    with pytest.raises(DocumentNumberConflictError):
        http.request("POST", "/sales-invoices", json_body={})


@responses.activate
def test_connection_error_raises_transport_error(config: ClientConfig) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/sales-invoices",
        body=requests.ConnectionError("connection refused"),
    )
    http = _client(config)

    with pytest.raises(TransportError) as excinfo:
        http.request("GET", "/sales-invoices")

    assert excinfo.value.code == "TRANSPORT_ERROR"


@responses.activate
def test_get_retries_server_errors(config: ClientConfig) -> None:
    retrying = ClientConfig(
        env_name=config.env_name,
        api_base_url=config.api_base_url,
        retries=1,
        retry_backoff_seconds=0,
    )
    responses.add(responses.GET, f"{BASE_URL}/taxes", json={"message": "down"}, status=503)
    responses.add(responses.GET, f"{BASE_URL}/taxes", json={"success": True, "data": [{"id": 1}]}, status=200)
    http = _client(retrying)

    assert http.request("GET", "/taxes") == [{"id": 1}]
    assert len(responses.calls) == 2


@responses.activate
def test_mutations_are_not_retried(config: ClientConfig) -> None:
    retrying = ClientConfig(
        env_name=config.env_name,
        api_base_url=config.api_base_url,
        retries=2,
        retry_backoff_seconds=0,
    )
    responses.add(responses.POST, f"{BASE_URL}/sales-invoices", json={"message": "down"}, status=502)
    http = _client(retrying)

    with pytest.raises(ServerError):
        http.request("POST", "/sales-invoices", json_body={})

    assert len(responses.calls) == 1


@responses.activate
def test_get_cache_and_invalidation(config: ClientConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/sales-invoices", json={"success": True, "data": {"total": 1}})
    responses.add(responses.GET, f"{BASE_URL}/sales-invoices", json={"success": True, "data": {"total": 2}})
    responses.add(responses.POST, f"{BASE_URL}/sales-invoices", json={"success": True, "data": {"id": 5}})
    http = _client(config)

    assert http.request("GET", "/sales-invoices") == {"total": 1}
    assert http.request("GET", "/sales-invoices") == {"total": 1}
    http.request("POST", "/sales-invoices", json_body={}, invalidate_paths=["/sales-invoices"])
    assert http.request("GET", "/sales-invoices") == {"total": 2}
    assert len(responses.calls) == 3


@responses.activate
def test_session_cookie_and_request_id_are_sent(config: ClientConfig) -> None:
    responses.add(responses.GET, f"{BASE_URL}/items", json={"success": True, "data": []})
    http = _client(config, cookies={"session": "abc123"})

    http.request("GET", "/items")

    sent = responses.calls[0].request
    assert "session=abc123" in sent.headers["Cookie"]
    assert sent.headers["X-Request-ID"]


@responses.activate
def test_response_after_context_switch_is_cancelled(config: ClientConfig) -> None:
    http = _client(config)

    def _slow_answer(request):
        http.switch_context("form:1")
        return 201, {}, '{"success": true, "data": {"id": 9}}'

    responses.add_callback(responses.POST, f"{BASE_URL}/journal-entries", callback=_slow_answer)

    with pytest.raises(TransportError) as excinfo:
        http.request("POST", "/journal-entries", json_body={}, context_key="form:1")

    assert excinfo.value.code == "REQUEST_CANCELLED"


def test_stale_context_version_is_cancelled_before_dispatch(config: ClientConfig) -> None:
    http = _client(config)
    http.switch_context("form:2")

    with pytest.raises(TransportError) as excinfo:
        http.request("POST", "/journal-entries", json_body={}, context_key="form:2", context_version=0)

    assert excinfo.value.code == "REQUEST_CANCELLED"


@responses.activate
def test_non_json_success_body_is_a_server_error(config: ClientConfig) -> None:
    responses.add(
        responses.GET,
        f"{BASE_URL}/sales-invoices/7",
        body="<html><body>Gateway login</body></html>",
        status=200,
        content_type="text/html",
    )
    http = _client(config)

    with pytest.raises(ServerError) as excinfo:
        http.request("GET", "/sales-invoices/7")
    with pytest.raises(ServerError):
        http.request("GET", "/sales-invoices/7")

    assert excinfo.value.code == "INVALID_RESPONSE"
    assert excinfo.value.status_code == 200
    assert excinfo.value.details["content_type"].startswith("text/html")
    assert http.last_operation is not None
    assert http.last_operation.result == "error"
    assert len(responses.calls) == 2
