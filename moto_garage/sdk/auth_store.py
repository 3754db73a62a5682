from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir
from pydantic import ValidationError

from .models import SessionData


@dataclass
class AuthStore:
    """Persists the signed-in session between console runs.

    A file that cannot be parsed is treated as signed out and removed.
    """

    app_name: str = "moto-garage"
    filename: str = "session.json"
    base_dir: Path | None = None

    @property
    def path(self) -> Path:
        directory = Path(self.base_dir) if self.base_dir else Path(user_data_dir(self.app_name, "MotoGarage"))
        directory.mkdir(parents=True, exist_ok=True)
        return directory / self.filename

    def save(self, session: SessionData) -> None:
        target = self.path
        staging = target.with_suffix(".tmp")
        staging.write_text(session.model_dump_json(indent=2))
        if os.name == "posix":
            staging.chmod(0o600)
        staging.replace(target)

    def load(self) -> SessionData | None:
        target = self.path
        if not target.is_file():
            return None
        try:
            return SessionData.model_validate_json(target.read_text())
        except ValidationError:
            self.clear()
            return None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
