from __future__ import annotations

from enum import Enum
from typing import Any

from moto_garage.app.config import DEFAULT_EDIT_CLOSE_DELAY_MS
from moto_garage.app.dispatch import UiLoop
from moto_garage.app.state.observable import Observable
from moto_garage.app.stores.listing_collection import UPDATED, ListingCollection
from moto_garage.app.stores.notices import MutationOutcome
from moto_garage.sdk.models import EDITABLE_LISTING_FIELDS, EditDraft, Listing

SUPERSEDED = "This listing changed before your edit was saved. Please review and try again."

_WIRE_NAMES = {
    "ownersCount": "owners_count",
    "kilometresRun": "kilometres_run",
    "modelYear": "model_year",
}


class EditStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"


class EditSession(Observable):
    """Modal edit of a single listing.

    The draft never touches the collection until ``submit``. After a
    successful submit the confirmation stays visible for ``close_delay_ms``
    and then the session closes itself. Every ``open``/``close`` bumps the
    session generation; timers and responses from an older generation are
    ignored.
    """

    def __init__(
        self,
        collection: ListingCollection,
        loop: UiLoop,
        close_delay_ms: int = DEFAULT_EDIT_CLOSE_DELAY_MS,
    ) -> None:
        super().__init__()
        self.collection = collection
        self.loop = loop
        self.close_delay_ms = max(0, close_delay_ms)
        self.status = EditStatus.CLOSED
        self.listing_id: str | None = None
        self.draft: EditDraft | None = None
        self.message: str | None = None
        self.error: str | None = None
        self._generation = 0
        self._close_handle: Any = None

    @property
    def is_open(self) -> bool:
        return self.status is not EditStatus.CLOSED

    @property
    def submitting(self) -> bool:
        return self.status is EditStatus.SUBMITTING

    def open(self, listing: Listing) -> None:
        self._cancel_auto_close()
        self._generation += 1
        self.listing_id = listing.id
        self.draft = EditDraft.from_listing(listing)
        self.status = EditStatus.OPEN
        self.message = None
        self.error = None
        self._notify()

    def change_field(self, name: str, value: Any) -> None:
        if self.draft is None:
            raise RuntimeError("No listing is being edited")
        field = _WIRE_NAMES.get(name, name)
        if field not in EDITABLE_LISTING_FIELDS:
            raise KeyError(name)
        self.draft = self.draft.model_copy(update={field: value})
        self._notify()

    def submit(self) -> bool:
        if self.status is not EditStatus.OPEN or self.draft is None or self.listing_id is None:
            return False
        generation = self._generation
        self.status = EditStatus.SUBMITTING
        self.message = None
        self.error = None
        self._notify()
        self.collection.update(
            self.listing_id,
            self.draft,
            on_result=lambda outcome: self._submitted(generation, outcome),
        )
        return True

    def close(self) -> None:
        self._cancel_auto_close()
        self._generation += 1
        self._reset()
        self._notify()

    def dispose(self) -> None:
        self._cancel_auto_close()
        super().dispose()

    def _submitted(self, generation: int, outcome: MutationOutcome) -> None:
        if self.disposed or generation != self._generation or self.status is not EditStatus.SUBMITTING:
            return
        if outcome.ok and outcome.applied:
            self.status = EditStatus.CONFIRMED
            self.message = UPDATED
            self._close_handle = self.loop.after(self.close_delay_ms, lambda: self._auto_close(generation))
        else:
            self.status = EditStatus.OPEN
            self.error = outcome.message if not outcome.ok else SUPERSEDED
        self._notify()

    def _auto_close(self, generation: int) -> None:
        self._close_handle = None
        if self.disposed or generation != self._generation or self.status is not EditStatus.CONFIRMED:
            return
        self.close()

    def _cancel_auto_close(self) -> None:
        handle, self._close_handle = self._close_handle, None
        if handle is not None:
            self.loop.after_cancel(handle)

    def _reset(self) -> None:
        self.status = EditStatus.CLOSED
        self.listing_id = None
        self.draft = None
        self.message = None
        self.error = None
