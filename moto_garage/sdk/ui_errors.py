from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, TransportError


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    trace_id: str | None = None

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def server_message(exc: ApiError) -> str | None:
    """Return the human-readable ``message`` the server sent, if any."""
    if isinstance(exc, TransportError):
        return None
    payload = exc.raw_payload
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


def user_message(exc: ApiError, fallback: str) -> str:
    return server_message(exc) or fallback


def to_user_facing_error(exc: ApiError, fallback: str = "Request failed") -> UserFacingError:
    details = f"{exc.code} (HTTP {exc.status_code})"
    if exc.details:
        details = f"{details}: {exc.details}"
    return UserFacingError(message=user_message(exc, fallback), details=details, trace_id=exc.trace_id)
