from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

ADMIN_ROLE = "admin"
_USER_ID_CLAIMS = ("id", "userId", "user_id", "sub")


@dataclass(frozen=True)
class SessionContext:
    """Identity of the signed-in user, as decoded by the auth layer."""

    user_id: str | None = None
    role: str | None = None
    access_token: str | None = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any] | None, access_token: str | None) -> "SessionContext":
        claims = claims or {}
        user_id = next((claims[key] for key in _USER_ID_CLAIMS if claims.get(key)), None)
        role = claims.get("role")
        return cls(
            user_id=str(user_id) if user_id is not None else None,
            role=str(role) if role else None,
            access_token=access_token,
        )

    @property
    def is_resolved(self) -> bool:
        return bool(self.user_id)

    @property
    def is_admin(self) -> bool:
        return (self.role or "").strip().lower() == ADMIN_ROLE

    @property
    def role_label(self) -> str:
        return "Administrator" if self.is_admin else "Member"
