from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from moto_garage.app.stores.listing_collection import ListingCollection, OutcomeCallback
from moto_garage.sdk.models import Buyer, Listing

EMPTY_ROSTER_TEXT = "No buyers have shown interest in this listing yet."


@dataclass(frozen=True)
class BuyerRow:
    index: int
    listing_id: str
    buyer: Buyer
    _remove: Callable[[OutcomeCallback | None], bool] = field(repr=False, compare=False)

    def remove(self, on_result: OutcomeCallback | None = None) -> bool:
        return self._remove(on_result)

    def render(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "user_id": self.buyer.user_id,
            "username": self.buyer.username,
            "contact": self.buyer.contact,
            "location": self.buyer.location,
        }


class BuyerRoster:
    """Read-only view over one listing's interested buyers."""

    def __init__(self, collection: ListingCollection, listing_id: str) -> None:
        self.collection = collection
        self.listing_id = listing_id

    @property
    def listing(self) -> Listing | None:
        return self.collection.get(self.listing_id)

    @property
    def is_empty(self) -> bool:
        listing = self.listing
        return listing is None or not listing.booked_buyers

    @property
    def empty_text(self) -> str | None:
        return EMPTY_ROSTER_TEXT if self.is_empty else None

    def rows(self) -> list[BuyerRow]:
        listing = self.listing
        if listing is None:
            return []
        return [
            BuyerRow(
                index=position,
                listing_id=listing.id,
                buyer=buyer,
                _remove=self._remover(buyer.user_id),
            )
            for position, buyer in enumerate(listing.booked_buyers, start=1)
        ]

    def render(self) -> dict[str, Any]:
        listing = self.listing
        return {
            "listing_id": self.listing_id,
            "title": listing.title if listing else None,
            "empty_text": self.empty_text,
            "buyers": [row.render() for row in self.rows()],
        }

    def _remover(self, buyer_id: str) -> Callable[[OutcomeCallback | None], bool]:
        def remove(on_result: OutcomeCallback | None = None) -> bool:
            return self.collection.remove_buyer(self.listing_id, buyer_id, on_result=on_result)

        return remove


def customer_rosters(collection: ListingCollection) -> list[BuyerRoster]:
    return [BuyerRoster(collection, listing.id) for listing in collection.listings]
