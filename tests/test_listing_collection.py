from __future__ import annotations

import pytest

from moto_garage.app.dispatch import InlineDispatcher
from moto_garage.app.domain.session_context import SessionContext
from moto_garage.app.stores.listing_collection import (
    DELETE_FAILED,
    DELETE_PROMPT,
    DELETED,
    LOAD_FAILED,
    MARKED_AVAILABLE,
    MARKED_SOLD,
    REMOVE_BUYER_PROMPT,
    UNEXPECTED_RESPONSE,
    UPDATE_FAILED,
    ListingCollection,
)
from moto_garage.sdk.exceptions import UnexpectedResponseError
from moto_garage.sdk.models import Listing
from tests.garage_fakes import FakeBikesClient, ManualDispatcher, RecordingConfirm, api_error, buyer, make_listing


def _loaded(bikes: FakeBikesClient, session: SessionContext, confirm=None, dispatcher=None) -> ListingCollection:
    collection = ListingCollection(bikes, session, dispatcher or InlineDispatcher(), confirm or RecordingConfirm())
    collection.load(session.user_id)
    if isinstance(dispatcher, ManualDispatcher):
        dispatcher.complete()
    return collection


def test_load_keeps_server_order_and_unique_ids(bikes, session) -> None:
    bikes.rows = [make_listing("b2"), make_listing("a1"), make_listing("b2", price=1)]
    collection = _loaded(bikes, session)

    assert [listing.id for listing in collection.listings] == ["b2", "a1"]
    assert collection.get("b2").price == 150000
    assert collection.loaded is True
    assert collection.loading is False
    assert bikes.calls == [("list_owned", "owner-1")]


def test_load_without_identity_issues_no_request(bikes) -> None:
    bikes.rows = [make_listing("a1")]
    collection = ListingCollection(bikes, SessionContext(), InlineDispatcher(), RecordingConfirm())

    assert collection.load(None) is False
    assert collection.listings == ()
    assert bikes.calls == []


def test_load_failure_sets_banner_and_keeps_previous_set(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    bikes.errors["list_owned"] = api_error(500)

    collection.load(session.user_id)

    assert collection.load_error == LOAD_FAILED
    assert [listing.id for listing in collection.listings] == ["a1"]
    assert collection.loading is False


def test_toggle_unsold_listing_marks_it_sold(bikes, session) -> None:
    bikes.rows = [make_listing("a1", sold=False, bookedBuyers=[])]
    collection = _loaded(bikes, session)
    bikes.calls.clear()

    collection.toggle_sold("a1")

    assert bikes.calls == [("mark_sold", "a1")]
    assert collection.get("a1").sold is True
    assert collection.notice.text == MARKED_SOLD
    assert not collection.notice.is_error


def test_toggle_twice_restores_original_state(bikes, session) -> None:
    bikes.rows = [make_listing("a1", sold=False)]
    collection = _loaded(bikes, session)

    collection.toggle_sold("a1")
    collection.toggle_sold(collection.get("a1"))

    assert collection.get("a1").sold is False
    assert collection.notice.text == MARKED_AVAILABLE
    assert [call[0] for call in bikes.calls[1:]] == ["mark_sold", "mark_available"]


def test_toggle_unknown_listing_raises(bikes, session) -> None:
    collection = _loaded(bikes, session)
    with pytest.raises(KeyError):
        collection.toggle_sold("missing")


def test_toggle_failure_leaves_entry_unchanged(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    before = collection.get("a1")
    bikes.errors["mark_sold"] = api_error(403, "Not your listing")
    outcomes = []

    collection.toggle_sold("a1", on_result=outcomes.append)

    assert collection.get("a1") == before
    assert collection.notice.is_error
    assert collection.notice.text == "Not your listing"
    assert collection.notice.trace_id == "trace-403"
    assert outcomes[0].ok is False


def test_delete_removes_exactly_one_entry(bikes, session, confirm) -> None:
    bikes.rows = [make_listing("a1"), make_listing("b2"), make_listing("c3")]
    collection = _loaded(bikes, session, confirm=confirm)
    keep = [collection.get("a1"), collection.get("c3")]

    assert collection.delete("b2") is True

    assert list(collection.listings) == keep
    assert collection.notice.text == DELETED
    assert confirm.prompts == [DELETE_PROMPT]


def test_declined_delete_sends_nothing(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session, confirm=RecordingConfirm(answer=False))
    bikes.calls.clear()

    assert collection.delete("a1") is False

    assert bikes.calls == []
    assert len(collection) == 1
    assert collection.notice is None


def test_delete_failure_uses_generic_text_without_server_message(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    bikes.errors["delete_bike"] = api_error(500)

    collection.delete("a1")

    assert len(collection) == 1
    assert collection.notice.text == DELETE_FAILED
    assert collection.notice.listing_id == "a1"


def test_remove_buyer_adopts_server_listing(bikes, session, confirm) -> None:
    bikes.rows = [make_listing("a1", bookedBuyers=[buyer("u9"), buyer("u7")])]
    collection = _loaded(bikes, session, confirm=confirm)

    collection.remove_buyer("a1", "u9")

    updated = collection.get("a1")
    assert updated == bikes.rows[0]
    assert updated.buyer_ids() == ["u7"]
    assert confirm.prompts == [REMOVE_BUYER_PROMPT]


def test_declined_remove_buyer_keeps_roster(bikes, session) -> None:
    bikes.rows = [make_listing("a1", bookedBuyers=[buyer("u9")])]
    collection = _loaded(bikes, session, confirm=RecordingConfirm(answer=False))

    assert collection.remove_buyer("a1", "u9") is False
    assert collection.get("a1").buyer_ids() == ["u9"]


def test_update_rejection_surfaces_server_message(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    before = collection.get("a1")
    bikes.errors["update_bike"] = api_error(400, "price too low")
    outcomes = []

    collection.update("a1", {"price": 50000}, on_result=outcomes.append)

    assert collection.get("a1") == before
    assert collection.notice.text == "price too low"
    assert outcomes[0].ok is False
    assert outcomes[0].message == "price too low"


def test_update_without_server_message_falls_back(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    bikes.errors["update_bike"] = api_error(422)

    collection.update("a1", {"price": 1})

    assert collection.notice.text == UPDATE_FAILED


def test_update_replaces_whole_entry_with_server_copy(bikes, session, monkeypatch) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    server_copy = make_listing("a1", price=99000, color="blue", images=["uploads/new.jpg"])
    monkeypatch.setattr(bikes, "update_bike", lambda _bike_id, _fields: server_copy)

    collection.update("a1", {"price": 99000})

    assert collection.get("a1") == server_copy


def test_response_for_another_listing_is_rejected(bikes, session, monkeypatch) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    monkeypatch.setattr(bikes, "mark_sold", lambda _bike_id: make_listing("zz", sold=True))

    collection.toggle_sold("a1")

    assert collection.get("a1").sold is False
    assert collection.get("zz") is None
    assert collection.notice.text == UNEXPECTED_RESPONSE


def test_malformed_response_is_reported_as_unexpected(bikes, session, monkeypatch) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)

    def broken(_bike_id: str) -> Listing:
        raise UnexpectedResponseError(
            code="UNEXPECTED_RESPONSE", message="shape", details=None, trace_id=None, status_code=200
        )

    monkeypatch.setattr(bikes, "mark_sold", broken)
    collection.toggle_sold("a1")

    assert collection.notice.text == UNEXPECTED_RESPONSE
    assert collection.get("a1").sold is False


def test_last_issued_mutation_wins_over_late_response(bikes, session) -> None:
    bikes.rows = [make_listing("a1", price=100)]
    dispatcher = ManualDispatcher()
    collection = _loaded(bikes, session, dispatcher=dispatcher)
    outcomes = []

    collection.update("a1", {"price": 200}, on_result=outcomes.append)
    collection.update("a1", {"price": 300}, on_result=outcomes.append)
    assert collection.is_pending("a1")

    dispatcher.complete(1)
    dispatcher.complete(0)

    assert collection.get("a1").price == 300
    assert [(outcome.ok, outcome.applied) for outcome in outcomes] == [(True, True), (True, False)]
    assert not collection.is_pending("a1")


def test_pending_flag_tracks_in_flight_mutation(bikes, session) -> None:
    bikes.rows = [make_listing("a1"), make_listing("b2")]
    dispatcher = ManualDispatcher()
    collection = _loaded(bikes, session, dispatcher=dispatcher)

    collection.toggle_sold("a1")

    assert collection.is_pending("a1")
    assert not collection.is_pending("b2")
    dispatcher.complete()
    assert not collection.is_pending("a1")


def test_responses_after_dispose_are_ignored(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    dispatcher = ManualDispatcher()
    collection = _loaded(bikes, session, dispatcher=dispatcher)
    notified = []
    collection.subscribe(lambda: notified.append(True))

    collection.toggle_sold("a1")
    notified.clear()
    collection.dispose()
    dispatcher.complete()

    assert notified == []
    assert collection.get("a1").sold is False


def test_listeners_are_notified_until_unsubscribed(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    notified = []
    unsubscribe = collection.subscribe(lambda: notified.append(collection.get("a1").sold))

    collection.toggle_sold("a1")
    unsubscribe()
    collection.toggle_sold("a1")

    assert notified
    assert notified[-1] is True


def test_clear_messages_keeps_data_and_load_banner(bikes, session) -> None:
    bikes.rows = [make_listing("a1")]
    collection = _loaded(bikes, session)
    collection.toggle_sold("a1")
    bikes.errors["list_owned"] = api_error(500)
    collection.load(session.user_id)

    collection.clear_messages()

    assert collection.notice is None
    assert collection.load_error == LOAD_FAILED
    assert collection.get("a1").sold is True


def test_delete_lands_even_when_a_later_mutation_was_issued(bikes, session) -> None:
    bikes.rows = [make_listing("a1"), make_listing("b2")]
    dispatcher = ManualDispatcher()
    collection = _loaded(bikes, session, dispatcher=dispatcher)
    outcomes = []

    collection.delete("a1")
    collection.toggle_sold("a1", on_result=outcomes.append)
    dispatcher.complete_all()

    assert [row.id for row in bikes.rows] == ["b2"]
    assert collection.get("a1") is None
    assert [listing.id for listing in collection.listings] == ["b2"]
    assert collection.notice.text == DELETED
    assert outcomes[0].ok is False
    assert not collection.is_pending("a1")


def test_older_success_is_kept_when_newer_mutation_fails(bikes, session) -> None:
    bikes.rows = [make_listing("a1", sold=False)]
    dispatcher = ManualDispatcher()
    collection = _loaded(bikes, session, dispatcher=dispatcher)

    collection.toggle_sold("a1")
    collection.update("a1", {"price": 50000})
    dispatcher.complete()
    bikes.errors["update_bike"] = api_error(400, "price too low")
    dispatcher.complete()

    assert bikes.rows[0].sold is True
    assert collection.get("a1").sold is True
    assert collection.get("a1").price == 150000
    assert collection.notice.text == "price too low"


def test_stale_failure_does_not_replace_newer_notice(bikes, session) -> None:
    bikes.rows = [make_listing("a1", sold=False)]
    dispatcher = ManualDispatcher()
    collection = _loaded(bikes, session, dispatcher=dispatcher)
    bikes.errors["update_bike"] = api_error(400, "price too low")
    outcomes = []

    collection.update("a1", {"price": 1}, on_result=outcomes.append)
    collection.toggle_sold("a1")
    dispatcher.complete(1)
    dispatcher.complete(0)

    assert collection.notice.text == MARKED_SOLD
    assert not collection.notice.is_error
    assert collection.get("a1").sold is True
    assert outcomes[0].ok is False
    assert outcomes[0].message == "price too low"
