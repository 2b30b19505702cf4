# dripmate_backend/app/services/water_hardness.py
from __future__ import annotations

import re
from typing import Any, Dict, Optional

from dripmate_backend.app.brew_engine.library_loader import load_yaml_rules
from dripmate_backend.app.brew_engine.pipeline import water_category_for_value
from dripmate_backend.app.models.environment import WaterHardness
from dripmate_backend.app.schemas import WaterCategory

REGIONS_FILE = "water_regions.yaml"
MANUAL_MAX_DH = 50.0

_ZIP_RE = re.compile(r"^\d{5}$")

_DESCRIPTIONS = {
    WaterCategory.VERY_SOFT: "Very soft water - finer grind and higher temperature recommended",
    WaterCategory.SOFT: "Soft water - slightly finer grind recommended",
    WaterCategory.MEDIUM: "Medium hard water - standard settings work well",
    WaterCategory.HARD: "Hard water - coarser grind and lower temperature recommended",
    WaterCategory.VERY_HARD: "Very hard water - clearly coarser grind, filtering recommended",
}


def category_for_value(value: float) -> WaterCategory:
    return water_category_for_value(value)

def describe_category(category: WaterCategory) -> str:
    return _DESCRIPTIONS.get(WaterCategory(category), "")

def _regions() -> Dict[str, Any]:
    return load_yaml_rules(REGIONS_FILE) or {}

def lookup(zip_code: str) -> WaterHardness:
    """
    Regional hardness for a 5-digit German postal code (keyed on its first
    two digits). Unknown regions get the national average, flagged as an estimate.
    """
    z = (zip_code or "").strip()
    if not _ZIP_RE.match(z):
        raise ValueError("Please enter a valid 5-digit postal code.")

    data = _regions()
    row = (data.get("regions") or {}).get(z[:2])
    if row:
        value = float(row["value"])
        return WaterHardness(
            value=value,
            category=category_for_value(value),
            region=row.get("region"),
            source=row.get("source"),
            is_estimate=False,
            zipCode=z,
        )

    fb = data.get("fallback") or {}
    value = float(fb.get("value", 16))
    return WaterHardness(
        value=value,
        category=category_for_value(value),
        region=fb.get("region", "Deutschland (Schätzwert)"),
        source=fb.get("source", "Durchschnittswert"),
        is_estimate=True,
        zipCode=z,
    )

def manual_hardness(value: float) -> WaterHardness:
    if value is None or value <= 0 or value > MANUAL_MAX_DH:
        raise ValueError(f"water hardness must be in (0, {MANUAL_MAX_DH:g}] °dH, got {value!r}")
    return WaterHardness(
        value=float(value),
        category=category_for_value(value),
        region="Manual Entry",
        source="User Input",
        is_manual=True,
    )

def active_water_hardness(
    manual: Optional[WaterHardness],
    api: Optional[WaterHardness],
) -> Optional[WaterHardness]:
    return manual or api

__all__ = [
    "category_for_value",
    "describe_category",
    "lookup",
    "manual_hardness",
    "active_water_hardness",
]
