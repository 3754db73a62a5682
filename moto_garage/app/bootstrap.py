from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from moto_garage.app.config import AppConfig
from moto_garage.app.dispatch import Dispatcher, HeadlessLoop, InlineDispatcher, UiLoop
from moto_garage.app.domain.session_context import SessionContext
from moto_garage.app.stores.edit_session import EditSession
from moto_garage.app.stores.listing_collection import Confirm, ListingCollection
from moto_garage.app.stores.profile_store import ProfileStore
from moto_garage.app.stores.tab_controller import Tab, TabController
from moto_garage.sdk.clients.bikes_client import BikesClient
from moto_garage.sdk.clients.profile_client import ProfileClient
from moto_garage.sdk.session import ApiSession


def _always_yes(_prompt: str) -> bool:
    return True


@dataclass
class Garage:
    """Every store behind the garage screen, wired to one session."""

    session: SessionContext
    profile: ProfileStore
    listings: ListingCollection
    editor: EditSession
    tabs: TabController
    loop: UiLoop = field(repr=False)

    def dispose(self) -> None:
        for store in (self.tabs, self.editor, self.listings, self.profile):
            store.dispose()


def build_garage(
    *,
    session: SessionContext,
    profile_client: ProfileClient,
    bikes_client: BikesClient,
    app_config: AppConfig | None = None,
    dispatcher: Dispatcher | None = None,
    loop: UiLoop | None = None,
    confirm: Confirm | None = None,
    initial_tab: Tab | str = Tab.PROFILE,
) -> Garage:
    app_config = app_config or AppConfig()
    loop = loop or HeadlessLoop()
    dispatcher = dispatcher or InlineDispatcher()
    listings = ListingCollection(bikes_client, session, dispatcher, confirm or _always_yes)
    return Garage(
        session=session,
        profile=ProfileStore(profile_client, session, dispatcher),
        listings=listings,
        editor=EditSession(listings, loop, close_delay_ms=app_config.edit_close_delay_ms),
        tabs=TabController(session, listings, initial=initial_tab),
        loop=loop,
    )


def garage_from_api_session(
    api: ApiSession,
    *,
    app_config: AppConfig | None = None,
    dispatcher: Dispatcher | None = None,
    loop: UiLoop | None = None,
    confirm: Callable[[str], bool] | None = None,
    initial_tab: Tab | str = Tab.PROFILE,
) -> Garage:
    context = SessionContext(user_id=api.user_id, role=api.role, access_token=api.token)
    return build_garage(
        session=context,
        profile_client=api.profile_client(),
        bikes_client=api.bikes_client(),
        app_config=app_config,
        dispatcher=dispatcher,
        loop=loop,
        confirm=confirm,
        initial_tab=initial_tab,
    )
