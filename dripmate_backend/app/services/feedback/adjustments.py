# dripmate_backend/app/services/feedback/adjustments.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from dripmate_backend.app.brew_engine.recommend import compute_brew_parameters, current_temperature
from dripmate_backend.app.config.manifest import HISTORY_CAP
from dripmate_backend.app.models.coffee import Coffee, HistoryEntry
from dripmate_backend.app.models.environment import Environment
from dripmate_backend.app.schemas import AdjustKind
from .suggestion import Suggestion, adjust_temp_string

log = logging.getLogger("dripmate.feedback")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

# Purpose:
# Every way a coffee's grind/temp can move away from (or back to) the engine
# baseline. Each mutation logs exactly one HistoryEntry, newest first.

def _timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def _display(coffee: Coffee, environment: Environment) -> Tuple[str, str]:
    rec = compute_brew_parameters(coffee, environment)
    return rec.grind_setting, rec.temperature

def add_history_entry(coffee: Coffee, entry: HistoryEntry, cap: int = HISTORY_CAP) -> None:
    coffee.feedback_history = [entry, *(coffee.feedback_history or [])][:cap]

# ---------------- baseline anchors ----------------

def get_initial_brew_values(coffee: Coffee, environment: Environment) -> Tuple[str, str]:
    """Grind/temp the engine gives this coffee with every user override stripped."""
    bare = coffee.model_copy(update={"custom_grind": None, "grind_offset": None, "custom_temp": None})
    return _display(bare, environment)

def ensure_initial_values(coffee: Coffee, environment: Environment) -> bool:
    if coffee.initial_grind and coffee.initial_temp:
        return False
    grind, temp = get_initial_brew_values(coffee, environment)
    changed = False
    if not coffee.initial_grind:
        coffee.initial_grind = grind
        changed = True
    if not coffee.initial_temp:
        coffee.initial_temp = temp
        changed = True
    return changed

def migrate_initial_values(coffees: Iterable[Coffee], environment: Environment) -> bool:
    changed = False
    for c in coffees:
        try:
            changed = ensure_initial_values(c, environment) or changed
        except ValueError as e:
            log.warning(f"[feedback] no baseline for coffee {c.id!r}: {e}")
    return changed

# ---------------- mutations ----------------

def apply_suggestion(
    coffee: Coffee,
    environment: Environment,
    suggestion: Suggestion,
    now: Optional[datetime] = None,
) -> HistoryEntry:
    ensure_initial_values(coffee, environment)
    prev_grind, prev_temp = _display(coffee, environment)

    if suggestion.grind_offset_delta:
        coffee.grind_offset = (coffee.grind_offset or 0) + suggestion.grind_offset_delta
    if suggestion.temp_delta and suggestion.new_temp:
        coffee.custom_temp = suggestion.new_temp

    new_grind, new_temp = _display(coffee, environment)
    entry = HistoryEntry(
        timestamp=_timestamp(now),
        previous_grind=prev_grind,
        previous_temp=prev_temp,
        new_grind=new_grind,
        new_temp=new_temp,
        grind_offset_delta=suggestion.grind_offset_delta or 0,
        custom_temp_applied=suggestion.new_temp if suggestion.temp_delta else None,
    )
    add_history_entry(coffee, entry)
    coffee.feedback = {}
    return entry

def record_manual_adjustment(
    coffee: Coffee,
    environment: Environment,
    kind: str,
    delta: int,
    now: Optional[datetime] = None,
) -> Optional[HistoryEntry]:
    try:
        kind = AdjustKind(kind)
    except ValueError:
        raise ValueError(f"unknown adjustment kind: {kind!r}") from None

    ensure_initial_values(coffee, environment)
    prev_grind, prev_temp = _display(coffee, environment)

    if kind == AdjustKind.GRIND:
        coffee.grind_offset = (coffee.grind_offset or 0) + int(delta)
        applied_temp = None
        grind_delta = int(delta)
    else:
        applied_temp = adjust_temp_string(current_temperature(coffee, environment), int(delta))
        if applied_temp is None:
            return None
        coffee.custom_temp = applied_temp
        grind_delta = 0

    new_grind, new_temp = _display(coffee, environment)
    entry = HistoryEntry(
        timestamp=_timestamp(now),
        previous_grind=prev_grind,
        previous_temp=prev_temp,
        new_grind=new_grind,
        new_temp=new_temp,
        grind_offset_delta=grind_delta,
        custom_temp_applied=applied_temp,
        manual_adjust=kind.value,
    )
    add_history_entry(coffee, entry)
    return entry

def reset_adjustments(
    coffee: Coffee,
    environment: Environment,
    now: Optional[datetime] = None,
) -> HistoryEntry:
    """
    Back to the engine baseline for the current environment. The dose
    (custom_amount) is a bag property, not an adjustment, so it survives.
    """
    prev_grind, prev_temp = _display(coffee, environment)
    coffee.initial_grind, coffee.initial_temp = get_initial_brew_values(coffee, environment)
    coffee.custom_grind = None
    coffee.grind_offset = None
    coffee.custom_temp = None
    coffee.feedback = None

    new_grind, new_temp = _display(coffee, environment)
    entry = HistoryEntry(
        timestamp=_timestamp(now),
        previous_grind=prev_grind,
        previous_temp=prev_temp,
        new_grind=new_grind,
        new_temp=new_temp,
        grind_offset_delta=0,
        custom_temp_applied=None,
        reset_to_initial=True,
    )
    add_history_entry(coffee, entry)
    return entry

# ---------------- display ----------------

def describe_history_entry(entry: HistoryEntry) -> str:
    if entry.reset_to_initial:
        return "Reset to engine baseline values"

    delta = entry.grind_offset_delta or 0
    sign = "+" if delta > 0 else ""
    if entry.manual_adjust == "grind":
        return f"Manual grind adjust {sign}{delta}"
    if entry.manual_adjust == "temp":
        return f"Manual temperature adjust {entry.custom_temp_applied or ''}".strip()

    parts = []
    if delta:
        parts.append(f"Grind offset {sign}{delta}")
    if entry.custom_temp_applied:
        parts.append(f"Temp override {entry.custom_temp_applied}")
    return " · ".join(parts) if parts else "No direct offset change"

__all__ = [
    "add_history_entry",
    "get_initial_brew_values",
    "ensure_initial_values",
    "migrate_initial_values",
    "apply_suggestion",
    "record_manual_adjustment",
    "reset_adjustments",
    "describe_history_entry",
]
