from __future__ import annotations

from dataclasses import dataclass

from ..http_client import Body, HttpClient


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None

    def _request(self, method: str, path: str, **kwargs) -> Body:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.access_token:
            headers.setdefault("Authorization", f"Bearer {self.access_token}")
        return self.http.request(method, path, headers=headers, **kwargs)
