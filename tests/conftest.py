from __future__ import annotations

import pytest

from moto_garage.app.dispatch import HeadlessLoop
from moto_garage.app.domain.session_context import SessionContext
from tests.garage_fakes import FakeBikesClient, RecordingConfirm


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(user_id="owner-1", role="member", access_token="token-1")


@pytest.fixture
def loop() -> HeadlessLoop:
    return HeadlessLoop(sleeper=lambda _seconds: None)


@pytest.fixture
def bikes() -> FakeBikesClient:
    return FakeBikesClient()


@pytest.fixture
def confirm() -> RecordingConfirm:
    return RecordingConfirm()
