from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import TransportError, UnexpectedResponseError
from .tracing import TRACE_HEADER, TraceContext

Body = dict[str, Any] | list[Any] | None
RequestHook = Callable[[str, str, dict[str, Any]], None]

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


@dataclass
class RequestRecord:
    """Outcome of the most recent call, kept for diagnostics."""

    module: str
    operation: str
    method: str
    path: str
    status_code: int
    duration_ms: int
    trace_id: str | None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class HttpClient:
    """JSON-over-HTTP transport shared by the garage clients.

    Idempotent reads are retried on 5xx and connection failures with
    exponential backoff; writes are sent exactly once.
    """

    config: ClientConfig
    trace: TraceContext | None = None
    session: requests.Session | None = None
    before_request: RequestHook | None = None
    last_request: RequestRecord | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            pool = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            for prefix in ("http://", "https://"):
                self.session.mount(prefix, pool)

    def url_for(self, path: str) -> str:
        return urljoin(self.config.api_base_url.rstrip("/") + "/", path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> Body:
        verb = method.upper()
        url = self.url_for(path)
        # Requests run on worker threads, so each one gets its own trace unless pinned.
        trace = self.trace or TraceContext()
        outgoing = {"Accept": "application/json", **(headers or {}), TRACE_HEADER: trace.ensure()}
        if self.before_request:
            self.before_request(verb, url, {"headers": outgoing, "json_body": json_body, "params": params})

        started = time.monotonic()

        def record(status_code: int) -> None:
            self.last_request = RequestRecord(
                module=module,
                operation=operation,
                method=verb,
                path=path,
                status_code=status_code,
                duration_ms=int((time.monotonic() - started) * 1000),
                trace_id=trace.trace_id,
            )

        try:
            response = self._send(verb, url, outgoing, json_body, params)
        except requests.RequestException as exc:
            record(0)
            raise TransportError(
                code="TRANSPORT_ERROR",
                message=str(exc),
                details={"type": type(exc).__name__},
                trace_id=trace.trace_id,
                status_code=0,
            ) from exc

        trace.update_from_headers(response.headers)

        if not response.ok:
            payload = _error_payload(response)
            trace.update_from_payload(payload)
            record(response.status_code)
            raise map_error(response.status_code, payload, trace.trace_id)

        record(response.status_code)
        return _success_body(response, trace.trace_id)

    def _send(
        self,
        verb: str,
        url: str,
        headers: dict[str, str],
        json_body: dict[str, Any] | None,
        params: dict[str, Any] | None,
    ) -> requests.Response:
        attempts = self.config.retries + 1 if verb in IDEMPOTENT_METHODS else 1
        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                response = self.session.request(
                    method=verb,
                    url=url,
                    headers=headers,
                    json=json_body,
                    params=params,
                    timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                    verify=self.config.verify_ssl,
                )
            except requests.RequestException:
                if last_attempt:
                    raise
            else:
                if response.status_code < 500 or last_attempt:
                    return response
            time.sleep(self.config.retry_backoff_seconds * (2**attempt))
        raise RuntimeError("retry loop exited without a response")


def _error_payload(response: requests.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _success_body(response: requests.Response, trace_id: str | None) -> Body:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedResponseError(
            code="UNEXPECTED_RESPONSE",
            message="Response body is not valid JSON",
            details={"content_type": response.headers.get("Content-Type")},
            trace_id=trace_id,
            status_code=response.status_code,
        ) from exc
