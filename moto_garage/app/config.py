from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from moto_garage.sdk.config import ConfigError

DEFAULT_EDIT_CLOSE_DELAY_MS = 1500


@dataclass(frozen=True)
class AppConfig:
    edit_close_delay_ms: int = DEFAULT_EDIT_CLOSE_DELAY_MS
    log_level: str = "INFO"


def load_app_config(env_file: str | None = None) -> AppConfig:
    load_dotenv(env_file)

    raw_delay = os.getenv("MOTO_GARAGE_EDIT_CLOSE_DELAY_MS", str(DEFAULT_EDIT_CLOSE_DELAY_MS))
    try:
        edit_close_delay_ms = int(raw_delay)
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid MOTO_GARAGE_EDIT_CLOSE_DELAY_MS: expected an integer, got {raw_delay!r}"
        ) from exc
    if edit_close_delay_ms < 0:
        raise ConfigError(f"Invalid MOTO_GARAGE_EDIT_CLOSE_DELAY_MS: expected >= 0, got {edit_close_delay_ms}")

    log_level = (os.getenv("MOTO_GARAGE_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Invalid MOTO_GARAGE_LOG_LEVEL: {log_level!r}")

    return AppConfig(edit_close_delay_ms=edit_close_delay_ms, log_level=log_level)
