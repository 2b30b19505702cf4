# dripmate_backend/app/config/paths.py
from __future__ import annotations

"""
Central path resolution for Dripmate.

Env overrides:
    DATA_DIR
    DRIPMATE_RULES_DIR

Defaults:
    <repo_root>/data
    <repo_root>/dripmate_backend/app/brew_engine/rules

DATA_DIR is re-read from the environment on every call to the data helpers,
so tests (and a running server) can point the stores at another tree.
"""

import os
from pathlib import Path

# ──────────────────────────────────────────────────────────────────────────────
_THIS_FILE = Path(__file__).resolve()

def _resolve_repo_root() -> Path:
    p = _THIS_FILE
    for _ in range(6):
        if (p.parent / "dripmate_backend" / "app").exists():
            return p.parent
        p = p.parent
    return _THIS_FILE.parents[3]

REPO_ROOT: Path = _resolve_repo_root()
APP_ROOT: Path = REPO_ROOT / "dripmate_backend" / "app"

def _clean_env(value: str | None) -> str | None:
    if value is None:
        return None
    v = value.strip().strip('"').strip("'")
    return v or None

def _env_path(name: str) -> Path | None:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return None
    return Path(raw).expanduser().resolve()

_default_data = REPO_ROOT / "data"
_default_rules = APP_ROOT / "brew_engine" / "rules"

RULES_DIR: Path = (_env_path("DRIPMATE_RULES_DIR") or _default_rules).resolve()

# ── Getters
def get_data_dir() -> Path:
    return (_env_path("DATA_DIR") or _default_data).resolve()

# ── Resolvers
def resolve_rules_file(name: str) -> Path:
    """Return absolute path under the rules dir for a given filename."""
    return RULES_DIR / name

def resolve_data_file(*parts: str) -> Path:
    """Return absolute path under DATA_DIR for nested parts and ensure parent exists."""
    p = get_data_dir().joinpath(*parts)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p

def path_under_data(*parts: str) -> Path:
    """Alias used by the data stores."""
    return resolve_data_file(*parts)

def ensure_data_dir_exists(*parts: str) -> Path:
    """
    Ensure DATA_DIR (and optional subpaths) exist.
    Examples:
        ensure_data_dir_exists() -> <DATA_DIR>
        ensure_data_dir_exists("backups") -> <DATA_DIR>/backups
    """
    p = get_data_dir().joinpath(*parts)
    p.mkdir(parents=True, exist_ok=True)
    return p

__all__ = [
    # constants
    "RULES_DIR", "REPO_ROOT", "APP_ROOT",
    # getters
    "get_data_dir",
    # resolvers
    "resolve_rules_file", "resolve_data_file",
    # shims
    "path_under_data", "ensure_data_dir_exists",
]
