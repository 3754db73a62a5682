from __future__ import annotations

from typing import Any, Callable, Mapping

from moto_garage.app.dispatch import Dispatcher
from moto_garage.app.domain.session_context import SessionContext
from moto_garage.app.infrastructure.logging.logger import get_logger, log_action
from moto_garage.app.state.observable import Observable
from moto_garage.app.stores.notices import MutationOutcome, Notice
from moto_garage.sdk.clients.bikes_client import BikesClient
from moto_garage.sdk.exceptions import ApiError, UnexpectedResponseError
from moto_garage.sdk.models import EditDraft, Listing
from moto_garage.sdk.ui_errors import user_message

Confirm = Callable[[str], bool]
OutcomeCallback = Callable[[MutationOutcome], None]

LOAD_FAILED = "Failed to load your listings."
DELETE_PROMPT = "Are you sure you want to delete this listing?"
REMOVE_BUYER_PROMPT = "Remove this buyer from the listing?"
DELETED = "Listing deleted successfully."
DELETE_FAILED = "Failed to delete listing."
MARKED_SOLD = "Listing marked as sold."
MARKED_AVAILABLE = "Listing marked as available."
STATUS_FAILED = "Failed to update listing status."
UPDATED = "Listing updated successfully!"
UPDATE_FAILED = "Failed to update listing."
BUYER_REMOVED = "Buyer removed successfully."
REMOVE_BUYER_FAILED = "Failed to remove buyer."
UNEXPECTED_RESPONSE = "Unexpected response from server."

logger = get_logger("moto_garage.listings")


def _dedupe(listings: list[Listing]) -> list[Listing]:
    seen: set[str] = set()
    unique: list[Listing] = []
    for listing in listings:
        if listing.id in seen:
            continue
        seen.add(listing.id)
        unique.append(listing)
    return unique


class ListingCollection(Observable):
    """Listings owned by the signed-in user.

    Every successful mutation replaces the whole affected entry with the
    listing the server returned. Each mutation takes a per-listing generation
    number. A success is applied unless a newer success for that listing has
    already landed, so the entry always reflects the latest known server
    state. Deletions always land and later responses for a deleted listing
    are dropped. Errors are only shown for the newest mutation.
    """

    def __init__(
        self,
        client: BikesClient,
        session: SessionContext,
        dispatcher: Dispatcher,
        confirm: Confirm,
    ) -> None:
        super().__init__()
        self.client = client
        self.session = session
        self.dispatcher = dispatcher
        self.confirm = confirm
        self._listings: list[Listing] = []
        self.loading = False
        self.loaded = False
        self.load_error: str | None = None
        self.notice: Notice | None = None
        self._load_generation = 0
        self._issued: dict[str, int] = {}
        self._applied: dict[str, int] = {}
        self._in_flight: dict[str, int] = {}

    @property
    def listings(self) -> tuple[Listing, ...]:
        return tuple(self._listings)

    def __len__(self) -> int:
        return len(self._listings)

    def get(self, listing_id: str) -> Listing | None:
        return next((listing for listing in self._listings if listing.id == listing_id), None)

    def is_pending(self, listing_id: str) -> bool:
        return self._in_flight.get(listing_id, 0) > 0

    def clear_messages(self) -> None:
        if self.notice is None:
            return
        self.notice = None
        self._notify()

    def load(self, owner_id: str | None) -> bool:
        """Fetch the owner's listings; returns False when no request was issued."""
        if not owner_id:
            self._log("load", None, None, "skipped")
            return False
        self._load_generation += 1
        generation = self._load_generation
        self.loading = True
        self.load_error = None
        self._notify()

        def loaded(listings: list[Listing]) -> None:
            if self.disposed or generation != self._load_generation:
                return
            self._listings = _dedupe(listings)
            self.loading = False
            self.loaded = True
            self._log("load", owner_id, None, "success", count=len(self._listings))
            self._notify()

        def failed(exc: ApiError) -> None:
            if self.disposed or generation != self._load_generation:
                return
            self.loading = False
            self.load_error = LOAD_FAILED
            self._log("load", owner_id, exc.trace_id, exc.code)
            self._notify()

        self.dispatcher.submit(lambda: self.client.list_owned(owner_id), loaded, failed)
        return True

    def delete(self, listing_id: str, on_result: OutcomeCallback | None = None) -> bool:
        if not self.confirm(DELETE_PROMPT):
            self._log("delete", listing_id, None, "declined")
            return False
        self._mutate(
            listing_id,
            action="delete",
            work=lambda: self.client.delete_bike(listing_id),
            apply=lambda _result: self._remove(listing_id),
            success_text=lambda _result: DELETED,
            failure_text=DELETE_FAILED,
            on_result=on_result,
            removes=True,
        )
        return True

    def toggle_sold(self, listing: Listing | str, on_result: OutcomeCallback | None = None) -> bool:
        listing_id = listing if isinstance(listing, str) else listing.id
        current = self.get(listing_id) or (listing if isinstance(listing, Listing) else None)
        if current is None:
            raise KeyError(listing_id)
        if current.sold:
            action, work = "mark_available", lambda: self.client.mark_available(listing_id)
        else:
            action, work = "mark_sold", lambda: self.client.mark_sold(listing_id)
        self._mutate(
            listing_id,
            action=action,
            work=work,
            apply=lambda result: self._replace(listing_id, result),
            success_text=lambda result: MARKED_SOLD if result.sold else MARKED_AVAILABLE,
            failure_text=STATUS_FAILED,
            on_result=on_result,
        )
        return True

    def update(
        self,
        listing_id: str,
        draft_fields: EditDraft | Mapping[str, Any],
        on_result: OutcomeCallback | None = None,
    ) -> bool:
        self._mutate(
            listing_id,
            action="update",
            work=lambda: self.client.update_bike(listing_id, draft_fields),
            apply=lambda result: self._replace(listing_id, result),
            success_text=lambda _result: UPDATED,
            failure_text=UPDATE_FAILED,
            on_result=on_result,
        )
        return True

    def remove_buyer(self, listing_id: str, buyer_id: str, on_result: OutcomeCallback | None = None) -> bool:
        if not self.confirm(REMOVE_BUYER_PROMPT):
            self._log("remove_buyer", listing_id, None, "declined")
            return False
        self._mutate(
            listing_id,
            action="remove_buyer",
            work=lambda: self.client.remove_buyer(listing_id, buyer_id),
            apply=lambda result: self._replace(listing_id, result),
            success_text=lambda _result: BUYER_REMOVED,
            failure_text=REMOVE_BUYER_FAILED,
            on_result=on_result,
        )
        return True

    def _mutate(
        self,
        listing_id: str,
        *,
        action: str,
        work: Callable[[], Any],
        apply: Callable[[Any], None],
        success_text: Callable[[Any], str],
        failure_text: str,
        on_result: OutcomeCallback | None,
        removes: bool = False,
    ) -> None:
        generation = self._issued.get(listing_id, 0) + 1
        self._issued[listing_id] = generation
        self._in_flight[listing_id] = self._in_flight.get(listing_id, 0) + 1
        self._notify()

        def succeeded(result: Any) -> None:
            if self.disposed:
                return
            self._settle(listing_id)
            if isinstance(result, Listing) and result.id != listing_id:
                report_failure(_mismatched(listing_id, result.id))
                return
            accepted = self._accept(listing_id, generation, removes)
            text = success_text(result)
            if accepted:
                apply(result)
                self.notice = Notice.success(text, listing_id=listing_id)
            self._log(action, listing_id, None, "success" if accepted else "stale")
            self._notify()
            if on_result:
                on_result(
                    MutationOutcome(
                        ok=True,
                        listing_id=listing_id,
                        message=text,
                        listing=result if isinstance(result, Listing) else None,
                        applied=accepted,
                    )
                )

        def failed(exc: ApiError) -> None:
            if self.disposed:
                return
            self._settle(listing_id)
            report_failure(exc)

        def report_failure(exc: ApiError) -> None:
            text = UNEXPECTED_RESPONSE if isinstance(exc, UnexpectedResponseError) else user_message(exc, failure_text)
            # Only the newest mutation on a listing that still exists may show an error.
            current = self.get(listing_id) is not None and generation == self._issued.get(listing_id)
            if current:
                self.notice = Notice.error(text, listing_id=listing_id, trace_id=exc.trace_id)
                self._log(action, listing_id, exc.trace_id, exc.code)
            else:
                self._log(action, listing_id, exc.trace_id, "stale", code=exc.code)
            self._notify()
            if on_result:
                on_result(
                    MutationOutcome(
                        ok=False,
                        listing_id=listing_id,
                        message=text,
                        trace_id=exc.trace_id,
                        applied=False,
                    )
                )

        self.dispatcher.submit(work, succeeded, failed)

    def _accept(self, listing_id: str, generation: int, removes: bool) -> bool:
        """Decide whether a successful response may change local state.

        A deletion always lands. Any other success lands unless the listing
        is gone or a newer success for it has already been applied.
        """
        if removes:
            return True
        if self.get(listing_id) is None:
            return False
        if generation <= self._applied.get(listing_id, 0):
            return False
        self._applied[listing_id] = generation
        return True

    def _settle(self, listing_id: str) -> None:
        remaining = self._in_flight.get(listing_id, 0) - 1
        if remaining > 0:
            self._in_flight[listing_id] = remaining
        else:
            self._in_flight.pop(listing_id, None)

    def _replace(self, listing_id: str, listing: Listing) -> None:
        for index, existing in enumerate(self._listings):
            if existing.id == listing_id:
                self._listings[index] = listing
                return

    def _remove(self, listing_id: str) -> None:
        self._listings = [listing for listing in self._listings if listing.id != listing_id]

    def _log(self, action: str, target_id: str | None, trace_id: str | None, outcome: str, **extra: object) -> None:
        log_action(
            logger,
            module="listings",
            action=action,
            actor_role=self.session.role,
            user_id=self.session.user_id,
            target_id=target_id,
            trace_id=trace_id,
            outcome=outcome,
            **extra,
        )


def _mismatched(expected: str, received: str) -> UnexpectedResponseError:
    return UnexpectedResponseError(
        code="UNEXPECTED_RESPONSE",
        message=f"Server returned listing {received} for {expected}",
        details={"expected": expected, "received": received},
        trace_id=None,
        status_code=200,
        raw_payload=None,
    )
