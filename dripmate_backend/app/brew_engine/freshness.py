# dripmate_backend/app/brew_engine/freshness.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional

from dripmate_backend.app.schemas import RoastStage
from .tables import ROAST_FADING_DAYS, ROAST_RESTING_DAYS

_LABELS = {
    RoastStage.RESTING: "Still Resting",
    RoastStage.SWEET: "Sweet Spot",
    RoastStage.FADING: "Fading",
    RoastStage.UNKNOWN: "",
}

def parse_roast_date(raw: Optional[str]) -> Optional[date]:
    s = (raw or "").strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return None

def days_since_roast(raw: Optional[str], today: Optional[date] = None) -> Optional[int]:
    roasted = parse_roast_date(raw)
    if roasted is None:
        return None
    days = ((today or date.today()) - roasted).days
    return days if days >= 0 else None

def roast_stage(raw: Optional[str], today: Optional[date] = None) -> RoastStage:
    days = days_since_roast(raw, today)
    if days is None:
        return RoastStage.UNKNOWN
    if days < ROAST_RESTING_DAYS:
        return RoastStage.RESTING
    if days < ROAST_FADING_DAYS:
        return RoastStage.SWEET
    return RoastStage.FADING

def freshness_badge(raw: Optional[str], today: Optional[date] = None) -> Optional[Dict[str, Any]]:
    """Badge data for a bag's roast date, or None when no usable date is set."""
    days = days_since_roast(raw, today)
    if days is None:
        return None
    stage = roast_stage(raw, today)
    return {"stage": stage.value, "label": _LABELS[stage], "days": days}

__all__ = ["parse_roast_date", "days_since_roast", "roast_stage", "freshness_badge"]
