from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError as SchemaError

from ..exceptions import UnexpectedResponseError
from ..models import UserProfile
from .base import BaseClient

PROFILE_PATH = "/users/profile"


@dataclass
class ProfileClient(BaseClient):
    def get_profile(self) -> UserProfile:
        payload = self._request("GET", PROFILE_PATH, module="profile", operation="load")
        return _profile_from(payload)

    def update_profile(self, profile: UserProfile | Mapping[str, Any]) -> UserProfile:
        model = profile if isinstance(profile, UserProfile) else UserProfile.model_validate(profile)
        payload = self._request(
            "PUT",
            PROFILE_PATH,
            json_body=model.model_dump(mode="json"),
            module="profile",
            operation="save",
        )
        if payload is None:
            return model
        return _profile_from(payload)


def _profile_from(payload: Any) -> UserProfile:
    if isinstance(payload, dict):
        body = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        try:
            return UserProfile.model_validate(body)
        except SchemaError as exc:
            raise _unexpected("Profile response did not match the profile schema", payload) from exc
    raise _unexpected("Expected profile response to be a JSON object", payload)


def _unexpected(message: str, payload: Any) -> UnexpectedResponseError:
    return UnexpectedResponseError(
        code="UNEXPECTED_RESPONSE",
        message=message,
        details={"type": type(payload).__name__},
        trace_id=None,
        status_code=200,
        raw_payload=None,
    )
