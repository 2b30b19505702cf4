# dripmate_backend/app/services/data_stores/__init__.py
"""
Unified export surface for data store helpers.

Import from here in routers/service code, e.g.:
    from dripmate_backend.app.services.data_stores import (
        # IO
        read_json, atomic_write,
        # Coffees
        load_coffee_list, save_coffee_list,
        # Settings
        load_settings, save_settings, load_environment, get_active_water_hardness,
    )
"""

from __future__ import annotations

# ---- Low-level IO helpers ----
from .io_utils import read_json, atomic_write, write_json  # noqa: F401

# ---- Coffee list ----
from .coffees import (  # noqa: F401
    coffees_path,
    load_coffee_list,
    save_coffee_list,
)

# ---- Settings ----
from .settings import (  # noqa: F401
    settings_path,
    load_settings,
    save_settings,
    load_environment,
    get_active_water_hardness,
)

__all__ = [
    # io_utils
    "read_json", "atomic_write", "write_json",
    # coffees
    "coffees_path", "load_coffee_list", "save_coffee_list",
    # settings
    "settings_path", "load_settings", "save_settings", "load_environment",
    "get_active_water_hardness",
]
