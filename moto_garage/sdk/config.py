from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlsplit

from dotenv import load_dotenv


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    asset_base_url: str | None = None
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    retries: int = 3
    retry_backoff_seconds: float = 0.3
    max_connections: int = 20
    verify_ssl: bool = True

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()

    @property
    def asset_origin(self) -> str:
        """Origin that relative image paths are resolved against."""
        if self.asset_base_url:
            return self.asset_base_url.rstrip("/")
        parts = urlsplit(self.api_base_url)
        return f"{parts.scheme}://{parts.netloc}"


def _require(values: dict[str, str | None], required: Iterable[str]) -> None:
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    env_name = (os.getenv("MOTO_GARAGE_ENV") or "dev").strip()
    env_key = env_name.upper()

    api_base_url = (
        (os.getenv(f"MOTO_GARAGE_API_BASE_URL_{env_key}") or "").strip()
        or (os.getenv("MOTO_GARAGE_API_BASE_URL") or "").strip()
    )
    _require({"MOTO_GARAGE_API_BASE_URL": api_base_url}, ["MOTO_GARAGE_API_BASE_URL"])
    _validate(
        urlsplit(api_base_url).scheme in {"http", "https"},
        f"Invalid MOTO_GARAGE_API_BASE_URL: expected an http(s) URL, got {api_base_url!r}",
    )

    asset_base_url = (os.getenv("MOTO_GARAGE_ASSET_BASE_URL") or "").strip() or None

    timeout_seconds = _read_float("MOTO_GARAGE_TIMEOUT_SECONDS", "10")
    _validate(
        timeout_seconds > 0,
        f"Invalid MOTO_GARAGE_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    connect_timeout_seconds = _read_float(
        "MOTO_GARAGE_CONNECT_TIMEOUT_SECONDS", str(min(timeout_seconds, 5.0))
    )
    _validate(
        connect_timeout_seconds > 0,
        (
            "Invalid MOTO_GARAGE_CONNECT_TIMEOUT_SECONDS: "
            f"expected > 0, got {connect_timeout_seconds}"
        ),
    )

    read_timeout_seconds = _read_float(
        "MOTO_GARAGE_READ_TIMEOUT_SECONDS",
        str(max(timeout_seconds, connect_timeout_seconds)),
    )
    _validate(
        read_timeout_seconds > 0,
        f"Invalid MOTO_GARAGE_READ_TIMEOUT_SECONDS: expected > 0, got {read_timeout_seconds}",
    )

    retries = _read_int("MOTO_GARAGE_RETRIES", "3")
    _validate(retries >= 0, f"Invalid MOTO_GARAGE_RETRIES: expected >= 0, got {retries}")

    retry_backoff_seconds = _read_float("MOTO_GARAGE_RETRY_BACKOFF_SECONDS", "0.3")
    _validate(
        retry_backoff_seconds >= 0,
        (
            "Invalid MOTO_GARAGE_RETRY_BACKOFF_SECONDS: "
            f"expected >= 0, got {retry_backoff_seconds}"
        ),
    )

    max_connections = _read_int("MOTO_GARAGE_MAX_CONNECTIONS", "20")
    _validate(
        max_connections >= 1,
        f"Invalid MOTO_GARAGE_MAX_CONNECTIONS: expected >= 1, got {max_connections}",
    )

    verify_ssl = _coerce_bool(os.getenv("MOTO_GARAGE_VERIFY_SSL"), True)

    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url.rstrip("/"),
        asset_base_url=asset_base_url,
        connect_timeout_seconds=connect_timeout_seconds,
        read_timeout_seconds=read_timeout_seconds,
        retries=retries,
        retry_backoff_seconds=retry_backoff_seconds,
        max_connections=max_connections,
        verify_ssl=verify_ssl,
    )
