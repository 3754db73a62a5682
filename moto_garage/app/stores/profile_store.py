from __future__ import annotations

from typing import Any, Mapping

from moto_garage.app.dispatch import Dispatcher
from moto_garage.app.domain.session_context import SessionContext
from moto_garage.app.infrastructure.logging.logger import get_logger, log_action
from moto_garage.app.state.observable import Observable
from moto_garage.sdk.clients.profile_client import ProfileClient
from moto_garage.sdk.exceptions import ApiError
from moto_garage.sdk.models import PROFILE_FIELDS, UserProfile
from moto_garage.sdk.ui_errors import user_message

LOAD_FAILED = "Failed to load profile."
SAVE_FAILED = "Failed to update profile."
SAVED = "Profile updated successfully!"

logger = get_logger("moto_garage.profile")


class ProfileStore(Observable):
    """Editable profile of the signed-in user.

    ``loading`` starts true and flips once the first load resolves, so the
    view can show a spinner before any data exists. ``saving`` stays true
    while at least one save is outstanding; saves are never cancelled.
    """

    def __init__(self, client: ProfileClient, session: SessionContext, dispatcher: Dispatcher) -> None:
        super().__init__()
        self.client = client
        self.session = session
        self.dispatcher = dispatcher
        self.profile = UserProfile()
        self.loading = True
        self.message: str | None = None
        self.error: str | None = None
        self._saves_in_flight = 0

    @property
    def saving(self) -> bool:
        return self._saves_in_flight > 0

    @property
    def avatar_initial(self) -> str:
        username = self.profile.username.strip()
        return username[0].upper() if username else "?"

    @property
    def role_label(self) -> str:
        return self.session.role_label

    def load(self) -> None:
        self.loading = True
        self._notify()
        self.dispatcher.submit(self.client.get_profile, self._loaded, self._load_failed)

    def change_field(self, name: str, value: str) -> None:
        if name not in PROFILE_FIELDS:
            raise KeyError(name)
        self.profile = self.profile.model_copy(update={name: "" if value is None else str(value)})
        self.message = None
        self.error = None
        self._notify()

    def save(self, profile: UserProfile | Mapping[str, Any] | None = None) -> None:
        if profile is not None:
            self.profile = profile if isinstance(profile, UserProfile) else UserProfile.model_validate(profile)
        snapshot = self.profile
        self._saves_in_flight += 1
        self.message = None
        self.error = None
        self._notify()
        self.dispatcher.submit(lambda: self.client.update_profile(snapshot), self._saved, self._save_failed)

    def _loaded(self, profile: UserProfile) -> None:
        if self.disposed:
            return
        self.profile = profile
        self.loading = False
        self._log("load", None, "success")
        self._notify()

    def _load_failed(self, exc: ApiError) -> None:
        if self.disposed:
            return
        self.loading = False
        self.error = LOAD_FAILED
        self._log("load", exc.trace_id, exc.code)
        self._notify()

    def _saved(self, _profile: UserProfile) -> None:
        if self.disposed:
            return
        self._saves_in_flight = max(0, self._saves_in_flight - 1)
        self.message = SAVED
        self.error = None
        self._log("save", None, "success")
        self._notify()

    def _save_failed(self, exc: ApiError) -> None:
        if self.disposed:
            return
        self._saves_in_flight = max(0, self._saves_in_flight - 1)
        self.message = None
        self.error = user_message(exc, SAVE_FAILED)
        self._log("save", exc.trace_id, exc.code)
        self._notify()

    def _log(self, action: str, trace_id: str | None, outcome: str) -> None:
        log_action(
            logger,
            module="profile",
            action=action,
            actor_role=self.session.role,
            user_id=self.session.user_id,
            target_id=self.session.user_id,
            trace_id=trace_id,
            outcome=outcome,
        )
