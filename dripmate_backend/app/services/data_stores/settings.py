# dripmate_backend/app/services/data_stores/settings.py
from __future__ import annotations

import uuid
from datetime import date
from pathlib import Path
from threading import RLock
from typing import Optional

from pydantic import ValidationError

from dripmate_backend.app.config.paths import path_under_data
from dripmate_backend.app.models.environment import Environment, Settings, WaterHardness
from .coffees import log
from .io_utils import read_json, write_json

_IO_LOCK = RLock()
SETTINGS_FILE = "settings.json"

def settings_path() -> Path:
    return path_under_data(SETTINGS_FILE)

def load_settings() -> Settings:
    """Persisted settings; a device id is minted and stored on first load."""
    with _IO_LOCK:
        raw = read_json(settings_path(), default={})
        try:
            settings = Settings.model_validate(raw if isinstance(raw, dict) else {})
        except ValidationError as e:
            log.warning(f"[store] settings unreadable ({e.error_count()} errors), using defaults")
            settings = Settings()
        if not settings.device_id:
            settings.device_id = f"device-{uuid.uuid4()}"
            save_settings(settings)
        return settings

def save_settings(settings: Settings) -> None:
    with _IO_LOCK:
        write_json(settings_path(), settings.model_dump(by_alias=True, exclude_none=True, mode="json"))

def load_environment(today: Optional[date] = None) -> Environment:
    return load_settings().environment(today)

def get_active_water_hardness() -> Optional[WaterHardness]:
    """Manual entry wins over the postal-code lookup."""
    return load_settings().active_water_hardness

__all__ = [
    "SETTINGS_FILE",
    "settings_path",
    "load_settings",
    "save_settings",
    "load_environment",
    "get_active_water_hardness",
]
