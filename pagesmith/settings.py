"""Application settings and data locations."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

log = logging.getLogger(__name__)

APP_NAME = "PageSmith"
DATA_DIR_ENV = "PAGESMITH_DATA_DIR"
API_KEY_ENV = "OPENAI_API_KEY"
MODEL_ENV = "PAGESMITH_OPENAI_MODEL"
LOG_LEVEL_ENV = "PAGESMITH_LOG_LEVEL"

DEFAULT_SETTINGS: Dict[str, str] = {
    "openai_model": "gpt-3.5-turbo",
    "openai_api_key": "",
    "storage_key": "pagesmith_canvas_state",
    "export_name": "my-landing-page.zip",
}


def app_data_dir() -> Path:
    """Return the platform-specific application data directory."""
    override = os.getenv(DATA_DIR_ENV)
    if override:
        target = Path(override).expanduser()
    elif os.name == "nt":
        target = Path(os.getenv("LOCALAPPDATA", Path.home())) / APP_NAME
    else:
        target = Path.home() / ".local" / "share" / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


def settings_path() -> Path:
    return app_data_dir() / "settings.json"


def state_dir() -> Path:
    return app_data_dir() / "state"


class SettingsManager:
    """Very small settings helper storing JSON data."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or settings_path()
        self._settings: Dict[str, str] = {}
        self.load()

    def load(self) -> None:
        self._settings = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                log.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
                data = {}
            if isinstance(data, dict):
                self._settings = {str(k): str(v) for k, v in data.items()}

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._settings, indent=2), encoding="utf-8")

    def get(self, key: str, default: Optional[str] = None) -> str:
        if key in self._settings and self._settings[key] != "":
            return self._settings[key]
        if default is not None:
            return default
        return DEFAULT_SETTINGS.get(key, "")

    def set(self, key: str, value: str) -> None:
        self._settings[key] = value
        self.save()

    def openai_api_key(self) -> str:
        return os.getenv(API_KEY_ENV, "") or self.get("openai_api_key")

    def openai_model(self) -> str:
        return os.getenv(MODEL_ENV, "") or self.get("openai_model")
