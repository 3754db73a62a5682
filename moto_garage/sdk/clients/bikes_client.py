from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError as SchemaError

from ..exceptions import UnexpectedResponseError
from ..models import EditDraft, Listing
from .base import BaseClient

BIKES_PATH = "/bikes"
_LIST_KEYS = ("items", "data", "bikes", "rows")


@dataclass
class BikesClient(BaseClient):
    def list_owned(self, owner_id: str) -> list[Listing]:
        payload = self._request(
            "GET",
            BIKES_PATH,
            params={"owner": owner_id},
            module="listings",
            operation="load",
        )
        try:
            return [Listing.model_validate(row) for row in _rows(payload)]
        except SchemaError as exc:
            raise _unexpected("Listings response did not match the listing schema", payload) from exc

    def delete_bike(self, bike_id: str) -> None:
        self._request("DELETE", f"{BIKES_PATH}/{bike_id}", module="listings", operation="delete")

    def mark_sold(self, bike_id: str) -> Listing:
        payload = self._request("PATCH", f"{BIKES_PATH}/{bike_id}/sold", module="listings", operation="mark_sold")
        return _listing_from(payload, "mark sold")

    def mark_available(self, bike_id: str) -> Listing:
        payload = self._request(
            "PATCH", f"{BIKES_PATH}/{bike_id}/available", module="listings", operation="mark_available"
        )
        return _listing_from(payload, "mark available")

    def update_bike(self, bike_id: str, fields: EditDraft | Mapping[str, Any]) -> Listing:
        body = fields.to_payload() if isinstance(fields, EditDraft) else dict(fields)
        payload = self._request(
            "PUT",
            f"{BIKES_PATH}/{bike_id}",
            json_body=body,
            module="listings",
            operation="update",
        )
        return _listing_from(payload, "update")

    def remove_buyer(self, bike_id: str, buyer_id: str) -> Listing:
        payload = self._request(
            "DELETE",
            f"{BIKES_PATH}/{bike_id}/book/{buyer_id}",
            module="listings",
            operation="remove_buyer",
        )
        return _listing_from(payload, "remove buyer")


def _rows(payload: Any) -> list[Any]:
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    raise _unexpected("Expected listings response to be a JSON array", payload)


def _listing_from(payload: Any, operation: str) -> Listing:
    if isinstance(payload, dict):
        body = payload.get("bike") if isinstance(payload.get("bike"), dict) else payload
        try:
            return Listing.model_validate(body)
        except SchemaError as exc:
            raise _unexpected(f"Unexpected {operation} response shape", payload) from exc
    raise _unexpected(f"Expected {operation} response to be a listing object", payload)


def _unexpected(message: str, payload: Any) -> UnexpectedResponseError:
    return UnexpectedResponseError(
        code="UNEXPECTED_RESPONSE",
        message=message,
        details={"type": type(payload).__name__},
        trace_id=None,
        status_code=200,
        raw_payload=None,
    )
