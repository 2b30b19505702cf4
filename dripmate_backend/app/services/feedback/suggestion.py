# dripmate_backend/app/services/feedback/suggestion.py
from __future__ import annotations

import re
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from dripmate_backend.app.brew_engine.recommend import compute_brew_parameters, current_temperature
from dripmate_backend.app.models.coffee import Coffee
from dripmate_backend.app.models.environment import Environment
from dripmate_backend.app.schemas import CUPPING_CATEGORIES, FEEDBACK_LEVELS

# Purpose:
# Translate cupping tags (low / balanced / high per category) into capped grind
# and temperature deltas against the coffee's current settings. Nothing here
# mutates a coffee except select_feedback().

GRIND_CAP = 4
TEMP_CAP = 2
BALANCED_HIDE_SECONDS = 3.0
BALANCED_MESSAGE = "✓ Perfect! No adjustments needed."

SLIDER_LOW_MAX = 33
SLIDER_HIGH_MIN = 67


@dataclass
class Suggestion:
    messages: List[str] = field(default_factory=list)
    grind_offset_delta: int = 0
    temp_delta: int = 0
    new_temp: Optional[str] = None
    preview_grind: Optional[str] = None
    preview_temp: Optional[str] = None
    capped: bool = False
    conflict: bool = False
    balanced: bool = False
    auto_hide_after: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

# ---------------- recording ----------------

def select_feedback(coffee: Coffee, category: str, value: str) -> bool:
    """
    Record one cupping tag on the coffee. Any keys outside the cupping scheme
    are dropped so old and new tag sets never mix. Returns True when the
    stored feedback changed.
    """
    if category not in CUPPING_CATEGORIES:
        raise ValueError(f"unknown feedback category: {category!r}")
    if value not in FEEDBACK_LEVELS:
        raise ValueError(f"unknown feedback level: {value!r}")

    before = dict(coffee.feedback or {})
    fb = cupping_feedback(before)
    fb[category] = value
    coffee.feedback = fb
    return fb != before

def slider_value_to_feedback(value: float) -> str:
    if value <= SLIDER_LOW_MAX:
        return "low"
    if value >= SLIDER_HIGH_MIN:
        return "high"
    return "balanced"

def cupping_feedback(feedback: Optional[Dict[str, str]]) -> Dict[str, str]:
    # "body" exists in the legacy scheme too (thin/heavy), so the level decides
    return {k: v for k, v in (feedback or {}).items() if k in CUPPING_CATEGORIES and v in FEEDBACK_LEVELS}

def is_balanced(feedback: Optional[Dict[str, str]]) -> bool:
    fb = cupping_feedback(feedback)
    return all(v == "balanced" for v in fb.values())

# ---------------- temperature strings ----------------

_TEMP_RE = re.compile(r"(\d+)(?:-(\d+))?")

def adjust_temp_string(current: str, delta: int) -> Optional[str]:
    """'92-93°C' shifted by delta -> '90-91°C'; None when the string carries no number."""
    m = _TEMP_RE.search(current or "")
    if not m:
        return None
    low = int(m.group(1)) + delta
    if m.group(2):
        return f"{low}-{int(m.group(2)) + delta}°C"
    return f"{low}°C"

# ---------------- rules ----------------

def _raw_deltas(fb: Dict[str, str]):
    messages: List[str] = []
    grind = 0
    temp = 0

    bitter_high = fb.get("bitterness") == "high"
    sweet_low = fb.get("sweetness") == "low"
    acid = fb.get("acidity")

    if bitter_high:
        messages += ["Bitterness is high", "→ Grind coarser", "→ Lower temperature by 2°C"]
        grind += 5
        temp -= 2
    elif fb.get("bitterness") == "low":
        messages += ["Bitterness is very low / cup feels sharp-thin", "→ Slightly finer grind"]
        grind -= 2

    if sweet_low:
        messages += ["Sweetness is low", "→ Increase extraction slightly (finer + warmer)"]
        grind -= 3
        temp += 1
    elif fb.get("sweetness") == "high":
        messages += ["Sweetness is high", "→ Keep this profile as a reference cup"]

    if acid == "high":
        messages += ["Acidity feels too sharp", "→ Grind finer", "→ Raise temperature by 1–2°C"]
        grind -= 4
        temp += 2
    elif acid == "low":
        if bitter_high:
            messages += ["Acidity is low + bitterness high", "→ Keep coarser/cooler direction to reduce harshness"]
            grind += 1
            temp -= 1
        elif sweet_low:
            messages += ["Acidity is low + sweetness low", "→ Increase extraction (slightly finer + warmer)"]
            grind -= 2
            temp += 1
        else:
            messages += ["Acidity feels muted", "→ Coarser by 1 click equivalent only"]
            grind += 1

    if fb.get("body") == "low":
        messages += ["Body is too light", "→ Grind slightly finer"]
        grind -= 3
    elif fb.get("body") == "high":
        messages += ["Body is too heavy", "→ Grind slightly coarser"]
        grind += 3

    return messages, grind, temp

def _clamp(x: int, cap: int) -> int:
    return max(-cap, min(cap, x))

def compute_suggestion(coffee: Coffee, environment: Environment) -> Optional[Suggestion]:
    fb = cupping_feedback(coffee.feedback)
    if not fb:
        return None

    messages, grind, temp = _raw_deltas(fb)
    if not messages or is_balanced(fb):
        return Suggestion(messages=[BALANCED_MESSAGE], balanced=True, auto_hide_after=BALANCED_HIDE_SECONDS)

    s = Suggestion(messages=messages)
    if fb.get("bitterness") == "high" and fb.get("acidity") == "high":
        s.conflict = True
        s.messages += [
            "Conflict: bitterness high + acidity high",
            "→ Keep temperature stable; change grind first, then taste again",
        ]

    s.grind_offset_delta = _clamp(grind, GRIND_CAP)
    s.temp_delta = _clamp(temp, TEMP_CAP)
    if s.grind_offset_delta != grind or s.temp_delta != temp:
        s.capped = True
        s.messages += ["Adjustment cap applied", "→ Changes limited to stable single-step iteration"]

    if s.grind_offset_delta:
        preview = coffee.model_copy(update={"grind_offset": (coffee.grind_offset or 0) + s.grind_offset_delta})
        s.preview_grind = compute_brew_parameters(preview, environment).grind_setting
    if s.temp_delta:
        s.new_temp = adjust_temp_string(current_temperature(coffee, environment), s.temp_delta)
        s.preview_temp = s.new_temp
    return s

# ---------------- auto-hide for the balanced message ----------------

TimerFactory = Callable[[float, Callable[[], None]], Any]

def _thread_timer(delay: float, fn: Callable[[], None]) -> threading.Timer:
    t = threading.Timer(delay, fn)
    t.daemon = True
    t.start()
    return t


class SuggestionHideTimers:
    """
    One pending hide per coffee id. When a timer fires, the coffee's feedback
    is looked up again and `on_hide` only runs if it is still balanced.
    """

    def __init__(
        self,
        get_feedback: Callable[[str], Optional[Dict[str, str]]],
        on_hide: Callable[[str], None],
        timer_factory: TimerFactory = _thread_timer,
    ):
        self._get_feedback = get_feedback
        self._on_hide = on_hide
        self._timer_factory = timer_factory
        self._timers: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def schedule(self, key: str, delay: float = BALANCED_HIDE_SECONDS) -> None:
        with self._lock:
            self.cancel(key)
            self._timers[key] = self._timer_factory(delay, lambda: self._fire(key))

    def cancel(self, key: str) -> None:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is not None and hasattr(timer, "cancel"):
            timer.cancel()

    def pending(self, key: str) -> bool:
        with self._lock:
            return key in self._timers

    def _fire(self, key: str) -> None:
        with self._lock:
            self._timers.pop(key, None)
        fb = self._get_feedback(key)
        if fb is not None and is_balanced(fb):
            self._on_hide(key)


__all__ = [
    "Suggestion",
    "select_feedback",
    "slider_value_to_feedback",
    "cupping_feedback",
    "is_balanced",
    "adjust_temp_string",
    "compute_suggestion",
    "SuggestionHideTimers",
    "GRIND_CAP",
    "TEMP_CAP",
    "BALANCED_MESSAGE",
]
