from __future__ import annotations

from moto_garage.app.bootstrap import build_garage, garage_from_api_session
from moto_garage.app.config import AppConfig
from moto_garage.app.stores.edit_session import EditStatus
from moto_garage.app.stores.tab_controller import Tab
from moto_garage.sdk.auth_store import AuthStore
from moto_garage.sdk.config import ClientConfig
from moto_garage.sdk.session import ApiSession
from tests.garage_fakes import FakeProfileClient, make_listing


def test_garage_shares_one_collection(bikes, session, loop) -> None:
    bikes.rows = [make_listing("a1")]
    garage = build_garage(
        session=session,
        profile_client=FakeProfileClient(profile={"username": "ravi"}),
        bikes_client=bikes,
        app_config=AppConfig(edit_close_delay_ms=10),
        loop=loop,
        initial_tab=Tab.LISTINGS,
    )

    garage.tabs.start()
    garage.editor.open(garage.listings.get("a1"))
    garage.editor.change_field("price", 1)
    garage.editor.submit()

    assert garage.editor.close_delay_ms == 10
    assert garage.editor.status is EditStatus.CONFIRMED
    assert garage.listings.get("a1").price == 1
    garage.dispose()
    assert loop.pending() == 0
    assert garage.listings.disposed


def test_garage_from_api_session_uses_stored_identity(tmp_path) -> None:
    config = ClientConfig(env_name="dev", api_base_url="https://api.example.com")
    api = ApiSession(config, auth_store=AuthStore(base_dir=tmp_path), token="tok", user_id="owner-1", role="admin")

    garage = garage_from_api_session(api)

    assert garage.session.user_id == "owner-1"
    assert garage.profile.role_label == "Administrator"
    assert garage.listings.client.access_token == "tok"
