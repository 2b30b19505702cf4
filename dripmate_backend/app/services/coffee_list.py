# dripmate_backend/app/services/coffee_list.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from dripmate_backend.app.models.coffee import Coffee, CoffeePatch
from dripmate_backend.app.services.sync.dedup import create_stable_coffee_id

# Purpose:
# In-memory lifecycle operations over the coffee list. Callers load the list,
# apply one of these, and save; nothing here touches disk.

REQUIRED_FIELDS = ("name", "origin", "process")

_DEFAULTS = {
    "cultivar": "Unknown",
    "altitude": "1500",
    "roaster": "Unknown",
    "tasting_notes": "No notes",
}

def _iso(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def _epoch(iso: Optional[str]) -> float:
    if not iso:
        return 0.0
    try:
        return datetime.fromisoformat(iso.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0

# ---------------- create / read / update ----------------

def add_coffee(coffees: List[Coffee], coffee: Coffee, now: Optional[datetime] = None) -> Coffee:
    """New bags go to the front of the list with an id and empty tasting state."""
    missing = [f for f in REQUIRED_FIELDS if not (getattr(coffee, f) or "").strip()]
    if missing:
        raise ValueError(f"missing required fields: {', '.join(missing)}")
    if coffee.custom_amount is not None and coffee.custom_amount <= 0:
        raise ValueError(f"dose must be positive, got {coffee.custom_amount!r}")

    for field, default in _DEFAULTS.items():
        if not (getattr(coffee, field) or "").strip():
            setattr(coffee, field, default)

    coffee.added_date = coffee.added_date or _iso(now)
    if not coffee.id:
        coffee.id = create_stable_coffee_id(coffee.to_wire(), len(coffees))
    if any(c.id == coffee.id for c in coffees):
        raise ValueError(f"coffee id already exists: {coffee.id}")
    coffee.feedback = coffee.feedback or {}
    coffee.feedback_history = coffee.feedback_history or []
    coffees.insert(0, coffee)
    return coffee

def find_coffee(coffees: List[Coffee], coffee_id: str) -> Coffee:
    for c in coffees:
        if c.id == coffee_id:
            return c
    raise KeyError(coffee_id)

def update_coffee(coffees: List[Coffee], coffee_id: str, patch: CoffeePatch) -> Coffee:
    coffee = find_coffee(coffees, coffee_id)
    for field, value in patch.model_dump(exclude_unset=True).items():
        setattr(coffee, field, value)
    return coffee

# ---------------- lifecycle ----------------

def soft_delete(coffees: List[Coffee], coffee_id: str, now: Optional[datetime] = None) -> Coffee:
    coffee = find_coffee(coffees, coffee_id)
    coffee.deleted = True
    coffee.deleted_at = _iso(now)
    return coffee

def restore(coffees: List[Coffee], coffee_id: str) -> Coffee:
    coffee = find_coffee(coffees, coffee_id)
    coffee.deleted = False
    coffee.deleted_at = None
    return coffee

def permanent_delete(coffees: List[Coffee], coffee_id: str) -> Coffee:
    coffee = find_coffee(coffees, coffee_id)
    coffees.remove(coffee)
    return coffee

def toggle_favorite(coffees: List[Coffee], coffee_id: str, now: Optional[datetime] = None) -> Coffee:
    coffee = find_coffee(coffees, coffee_id)
    coffee.favorite = not coffee.favorite
    coffee.favorited_at = _iso(now) if coffee.favorite else None
    return coffee

# ---------------- views ----------------

def active_coffees(coffees: List[Coffee]) -> List[Coffee]:
    """Not deleted; favorites first (newest favorite first), then newest added."""
    live = [c for c in coffees if not c.deleted]
    return sorted(
        live,
        key=lambda c: (
            0 if c.favorite else 1,
            -_epoch(c.favorited_at) if c.favorite else 0.0,
            -_epoch(c.added_date),
        ),
    )

def recovery_bin(coffees: List[Coffee]) -> List[Coffee]:
    return [c for c in coffees if c.deleted]

__all__ = [
    "add_coffee",
    "find_coffee",
    "update_coffee",
    "soft_delete",
    "restore",
    "permanent_delete",
    "toggle_favorite",
    "active_coffees",
    "recovery_bin",
]
