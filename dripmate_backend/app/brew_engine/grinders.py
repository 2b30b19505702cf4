# dripmate_backend/app/brew_engine/grinders.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional

from dripmate_backend.app.schemas import GrinderModel, GrindUnit
from .library_loader import load_yaml_rules
from .tables import GrindBase

# Purpose:
# Project the grinder-agnostic grind base onto a concrete grinder's dial.
# Calibration data lives in rules/grinders.yaml; this module only does the
# arithmetic, clamping and display formatting.

log = logging.getLogger("dripmate.grinders")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

CATALOG_FILE = "grinders.yaml"


@dataclass(frozen=True)
class GrinderProfile:
    key: GrinderModel
    label: str
    unit: GrindUnit
    reference: str          # "clicks" | "steps"
    anchor: float
    reference_point: float
    base_scale: float
    offset_scale: float
    min: float
    max: Optional[float] = None

    def raw_value(self, grind_base: GrindBase, offset: int = 0) -> float:
        base = grind_base.steps if self.reference == "steps" else grind_base.clicks
        return self.anchor + (base - self.reference_point) * self.base_scale + (offset or 0) * self.offset_scale

    def clamp(self, value: float) -> float:
        value = max(self.min, value)
        if self.max is not None:
            value = min(self.max, value)
        return value

    def format(self, value: float) -> str:
        if self.unit == GrindUnit.CLICKS:
            return f"{_round_half_up(value, '1')} clicks"
        if self.unit == GrindUnit.ROTATIONS:
            return f"{_round_half_up(value, '0.1')} rot"
        if self.unit == GrindUnit.INTEGER_SCALE:
            return str(_round_half_up(value, "1"))
        return str(_round_half_up(value, "0.1"))


def _round_half_up(value: float, quantum: str) -> Decimal:
    # str() first so 3.25 rounds to 3.3 rather than following the binary value
    return Decimal(str(value)).quantize(Decimal(quantum), rounding=ROUND_HALF_UP)

def _squash(s: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9]", "", (s or "").lower())

# ---------------- catalog ----------------

def _catalog() -> Dict[str, Any]:
    data = load_yaml_rules(CATALOG_FILE) or {}
    if not isinstance(data.get("grinders"), dict):
        raise ValueError(f"{CATALOG_FILE} has no 'grinders' mapping")
    return data

@lru_cache(maxsize=1)
def _profiles() -> Dict[GrinderModel, GrinderProfile]:
    out: Dict[GrinderModel, GrinderProfile] = {}
    for key, row in _catalog()["grinders"].items():
        model = GrinderModel(str(key))
        out[model] = GrinderProfile(
            key=model,
            label=str(row["label"]),
            unit=GrindUnit(row["unit"]),
            reference=str(row.get("reference", "clicks")),
            anchor=float(row["anchor"]),
            reference_point=float(row["reference_point"]),
            base_scale=float(row.get("base_scale", 1.0)),
            offset_scale=float(row.get("offset_scale", 1.0)),
            min=float(row["min"]),
            max=float(row["max"]) if row.get("max") is not None else None,
        )
    missing = [m.value for m in GrinderModel if m not in out]
    if missing:
        raise ValueError(f"{CATALOG_FILE} is missing profiles: {missing}")
    return out

@lru_cache(maxsize=1)
def _alias_index() -> Dict[str, GrinderModel]:
    idx: Dict[str, GrinderModel] = {}
    for model, profile in _profiles().items():
        idx[_squash(model.value)] = model
        idx[_squash(profile.label)] = model
    for alias, target in (_catalog().get("aliases") or {}).items():
        idx[_squash(str(alias))] = GrinderModel(str(target))
    return idx

def default_grinder() -> GrinderModel:
    return GrinderModel(str(_catalog().get("default", GrinderModel.FELLOW_GEN2.value)))

# ---------------- public API ----------------

def migrate_grinder_key(raw: Optional[str]) -> GrinderModel:
    """
    Map a stored grinder identifier onto the current enumeration.
    Legacy keys ("fellow", "comandante", "timemore") and display labels are
    accepted in any case/spacing; anything else falls back to the default.
    """
    if isinstance(raw, GrinderModel):
        return raw
    found = _alias_index().get(_squash(raw))
    if found is not None:
        return found
    fallback = default_grinder()
    log.info(f"[grinders] unknown grinder {raw!r}, using {fallback.value}")
    return fallback

def get_profile(grinder: GrinderModel) -> GrinderProfile:
    return _profiles()[migrate_grinder_key(grinder)]

def list_profiles() -> List[GrinderProfile]:
    return list(_profiles().values())

def get_grinder_label(grinder: GrinderModel) -> str:
    return get_profile(grinder).label

def project_grind(grind_base: GrindBase, grinder: GrinderModel, offset: Optional[int] = 0) -> str:
    """Display string for `grind_base` on `grinder`, including the user's offset."""
    profile = get_profile(grinder)
    return profile.format(profile.clamp(profile.raw_value(grind_base, offset or 0)))

__all__ = [
    "GrinderProfile",
    "migrate_grinder_key",
    "default_grinder",
    "get_profile",
    "list_profiles",
    "get_grinder_label",
    "project_grind",
]
