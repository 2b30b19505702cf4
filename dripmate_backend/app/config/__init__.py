# dripmate_backend/app/config/__init__.py
from __future__ import annotations

# Re-export config surface expected by callers across the app.

# Env-driven settings live in manifest.py
from .manifest import (
    DEFAULT_DOSE_G,
    HISTORY_CAP,
    BACKEND_URL,
    SYNC_TIMEOUT_S,
)

# Path helpers live in paths.py
from .paths import (
    REPO_ROOT,
    APP_ROOT,
    RULES_DIR,
    get_data_dir,
    resolve_rules_file,
    resolve_data_file,
    path_under_data,
    ensure_data_dir_exists,
)

__all__ = [
    # manifest
    "DEFAULT_DOSE_G",
    "HISTORY_CAP",
    "BACKEND_URL",
    "SYNC_TIMEOUT_S",
    # paths
    "REPO_ROOT",
    "APP_ROOT",
    "RULES_DIR",
    "get_data_dir",
    "resolve_rules_file",
    "resolve_data_file",
    "path_under_data",
    "ensure_data_dir_exists",
]
