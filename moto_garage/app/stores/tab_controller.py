from __future__ import annotations

from enum import Enum

from moto_garage.app.domain.session_context import SessionContext
from moto_garage.app.state.observable import Observable
from moto_garage.app.stores.listing_collection import ListingCollection


class Tab(str, Enum):
    PROFILE = "profile"
    LISTINGS = "listings"
    CUSTOMERS = "customers"


LISTING_TABS = frozenset({Tab.LISTINGS, Tab.CUSTOMERS})


class TabController(Observable):
    def __init__(
        self,
        session: SessionContext,
        collection: ListingCollection,
        initial: Tab | str = Tab.PROFILE,
    ) -> None:
        super().__init__()
        self.session = session
        self.collection = collection
        self.active = Tab(initial)
        self._listings_requested = False

    @property
    def listings_requested(self) -> bool:
        return self._listings_requested

    def start(self) -> None:
        self._ensure_listings()
        self._notify()

    def select(self, tab: Tab | str) -> None:
        target = Tab(tab)
        if target is not self.active:
            self.collection.clear_messages()
            self.active = target
        self._ensure_listings()
        self._notify()

    def _ensure_listings(self) -> None:
        # Only counts once a request actually went out, i.e. identity was resolved.
        if self.active in LISTING_TABS and not self._listings_requested:
            self._listings_requested = self.collection.load(self.session.user_id)
