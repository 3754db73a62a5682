from __future__ import annotations

from dataclasses import dataclass

from .auth_store import AuthStore
from .clients.bikes_client import BikesClient
from .clients.profile_client import ProfileClient
from .config import ClientConfig
from .http_client import HttpClient
from .models import SessionData


@dataclass
class ApiSession:
    config: ClientConfig
    auth_store: AuthStore | None = None
    http: HttpClient | None = None
    token: str | None = None
    user_id: str | None = None
    role: str | None = None

    def __post_init__(self) -> None:
        self.auth_store = self.auth_store or AuthStore()
        self.http = self.http or HttpClient(config=self.config)
        if not self.token:
            stored = self.auth_store.load()
            if stored:
                self.token = stored.access_token
                self.user_id = stored.user_id
                self.role = stored.role

    def profile_client(self) -> ProfileClient:
        return ProfileClient(http=self.http, access_token=self.token)

    def bikes_client(self) -> BikesClient:
        return BikesClient(http=self.http, access_token=self.token)

    def establish(self, access_token: str, *, user_id: str | None, role: str | None) -> None:
        self.token = access_token
        self.user_id = user_id
        self.role = role
        self.auth_store.save(
            SessionData(access_token=access_token, user_id=user_id, role=role, env_name=self.config.env_name)
        )

    def clear(self) -> None:
        self.token = None
        self.user_id = None
        self.role = None
        if self.auth_store:
            self.auth_store.clear()
