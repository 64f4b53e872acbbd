from __future__ import annotations

import json
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_envelope_rejection, map_error
from .exceptions import ServerError, TransportError
from .tracing import REQUEST_ID_HEADER, RequestTrace

ResponseHook = Callable[[requests.Response], None]
RequestHook = Callable[[str, str, dict[str, Any]], None]
Body = dict[str, Any] | list[Any] | None

_RETRYABLE_METHODS = frozenset({"GET", "HEAD"})
# Headers that change what a GET returns; only these go into the cache key.
_CACHE_KEY_HEADERS = frozenset({"Authorization", "X-Company-ID"})


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    request_id: str | None


def unwrap_envelope(
    parsed: Any,
    *,
    status_code: int,
    request_id: str | None,
) -> Body:
    """Return the ``data`` member of a ``{success, message, data}`` envelope.

    Bodies that are not envelopes pass through untouched. An envelope with
    ``success: false`` is an authoritative rejection even on a 2xx status.
    """
    if not isinstance(parsed, dict) or "success" not in parsed:
        return parsed
    if not parsed.get("success"):
        raise map_envelope_rejection(parsed, status_code, request_id)
    return parsed.get("data")


@dataclass
class GetCache:
    """Short-lived cache of GET bodies, dropped by path after writes."""

    ttl_seconds: float = 3.0
    entries: dict[str, tuple[float, Body]] = field(default_factory=dict)

    @staticmethod
    def key(url: str, headers: Mapping[str, str], params: Mapping[str, Any] | None) -> str:
        scoped = {name: value for name, value in headers.items() if name in _CACHE_KEY_HEADERS}
        return json.dumps({"url": url, "headers": scoped, "params": dict(params or {})}, sort_keys=True, default=str)

    def get(self, key: str) -> tuple[bool, Body]:
        entry = self.entries.get(key)
        if entry is None:
            return False, None
        expires_at, body = entry
        if time.monotonic() >= expires_at:
            del self.entries[key]
            return False, None
        return True, body

    def put(self, key: str, body: Body) -> None:
        self.entries[key] = (time.monotonic() + self.ttl_seconds, body)

    def invalidate(self, paths: list[str]) -> None:
        for key in [key for key in self.entries if any(path in key for path in paths)]:
            del self.entries[key]

    def clear(self) -> None:
        self.entries.clear()


@dataclass
class HttpClient:
    config: ClientConfig
    trace: RequestTrace | None = None
    session: requests.Session | None = None
    cookies: Mapping[str, str] | None = None
    before_request: RequestHook | None = None
    after_response: ResponseHook | None = None
    cache_ttl_seconds: float = 3.0
    enable_get_cache: bool = True
    last_operation: LastOperation | None = None
    _cache: GetCache = field(init=False, repr=False)
    _context_versions: dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        for name, value in (self.cookies or {}).items():
            self.session.cookies.set(name, value)
        self._cache = GetCache(ttl_seconds=self.cache_ttl_seconds)

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        response_hook: ResponseHook | None = None,
        retry_mutation: bool = False,
        module: str = "unknown",
        operation: str = "unknown",
        use_get_cache: bool = True,
        context_key: str | None = None,
        context_version: int | None = None,
        invalidate_paths: list[str] | None = None,
    ) -> Body:
        """Send one request and return the unwrapped body.

        With ``context_key`` the call belongs to a screen; switching that
        context while the call is out turns its answer into
        ``TransportError(code="REQUEST_CANCELLED")``.
        """
        method = method.upper()
        trace = self.trace or RequestTrace()
        request_headers = {"Accept": "application/json", **(headers or {})}
        request_headers[REQUEST_ID_HEADER] = trace.ensure()
        url = urljoin(self.config.api_base_url.rstrip("/") + "/", path.lstrip("/"))
        if self.before_request:
            self.before_request(method, url, {"headers": request_headers, "json_body": json_body, "params": params})

        cache_key = None
        if method == "GET" and self.enable_get_cache and use_get_cache:
            cache_key = GetCache.key(url, request_headers, params)
            hit, cached = self._cache.get(cache_key)
            if hit:
                self.last_operation = LastOperation(module, operation, 0, "success(cache)", trace.request_id)
                return cached

        if context_key and context_version is None:
            context_version = self.get_context_version(context_key)
        if not self._context_is_current(context_key, context_version):
            raise self._cancelled(trace, "Request cancelled before dispatch")

        started = time.monotonic()
        attempts = self.config.retries + 1 if method in _RETRYABLE_METHODS or retry_mutation else 1
        try:
            response = self._send(method, url, request_headers, json_body, params, attempts)
        except TransportError as exc:
            exc.request_id = trace.request_id
            self._finish(module, operation, started, "error", trace)
            raise

        # A late answer for a form the user already left must not reach it.
        if not self._context_is_current(context_key, context_version):
            raise self._cancelled(trace, "Request cancelled due to context switch")

        if self.after_response:
            self.after_response(response)
        trace.update_from_headers(response.headers)
        if response_hook:
            response_hook(response)

        if not response.ok:
            self._finish(module, operation, started, "error", trace)
            raise map_error(response.status_code, _error_payload(response), trace.request_id)

        data: Body = None
        if response.content:
            try:
                parsed = response.json()
            except ValueError as exc:
                self._finish(module, operation, started, "error", trace)
                raise ServerError(
                    code="INVALID_RESPONSE",
                    message="Service returned a response that is not JSON",
                    details={"type": "invalid_json", "content_type": response.headers.get("Content-Type")},
                    request_id=trace.request_id,
                    status_code=response.status_code,
                ) from exc
            try:
                data = unwrap_envelope(parsed, status_code=response.status_code, request_id=trace.request_id)
            except Exception:
                self._finish(module, operation, started, "rejected", trace)
                raise
        if cache_key is not None:
            self._cache.put(cache_key, data)
        elif invalidate_paths:
            self._cache.invalidate(invalidate_paths)
        self._finish(module, operation, started, "success", trace)
        return data

    def switch_context(self, context_key: str) -> int:
        self._context_versions[context_key] = self.get_context_version(context_key) + 1
        return self._context_versions[context_key]

    def get_context_version(self, context_key: str) -> int:
        return self._context_versions.get(context_key, 0)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        json_body: dict[str, Any] | None,
        params: dict[str, Any] | None,
        attempts: int,
    ) -> requests.Response:
        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=json_body,
                    params=params,
                    timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                    verify=self.config.verify_ssl,
                )
            except requests.RequestException as exc:
                if last:
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc),
                        details={"type": type(exc).__name__},
                        request_id=None,
                        status_code=0,
                    ) from exc
            else:
                if response.status_code < 500 or last:
                    return response
            time.sleep(self.config.retry_backoff_seconds * (2**attempt))
        raise RuntimeError("retry loop exited without a response")

    def _context_is_current(self, context_key: str | None, context_version: int | None) -> bool:
        if not context_key or context_version is None:
            return True
        return self.get_context_version(context_key) == context_version

    @staticmethod
    def _cancelled(trace: RequestTrace, message: str) -> TransportError:
        return TransportError(
            code="REQUEST_CANCELLED",
            message=message,
            details={"type": "context_switched"},
            request_id=trace.request_id,
            status_code=0,
        )

    def _finish(self, module: str, operation: str, started: float, result: str, trace: RequestTrace) -> None:
        elapsed = int((time.monotonic() - started) * 1000)
        self.last_operation = LastOperation(module, operation, elapsed, result, trace.request_id)


def _error_payload(response: requests.Response) -> dict[str, Any] | None:
    try:
        payload = response.json()
    except ValueError:
        return {"message": response.text} if response.text else None
    return payload if isinstance(payload, dict) else None
