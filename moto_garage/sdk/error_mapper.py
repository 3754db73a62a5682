from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ServerError,
    ValidationError,
)

_BY_STATUS: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthError,
    403: PermissionError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitError,
}


def error_class_for(status_code: int) -> type[ApiError]:
    if status_code >= 500:
        return ServerError
    return _BY_STATUS.get(status_code, ApiError)


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    """Build the typed error for a non-2xx response.

    ``raw_payload`` keeps the body as sent so callers can tell a server
    supplied ``message`` apart from the generic one filled in here.
    """
    body = dict(payload or {})
    server_trace = body.get("trace_id")
    return error_class_for(status_code)(
        code=str(body.get("code") or "HTTP_ERROR"),
        message=str(body.get("message") or "Request failed"),
        details=body.get("details"),
        trace_id=str(server_trace) if server_trace is not None else trace_id,
        status_code=status_code,
        raw_payload=body,
    )
