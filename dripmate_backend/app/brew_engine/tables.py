# dripmate_backend/app/brew_engine/tables.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from dripmate_backend.app.schemas import BrewMethod, BrewStyle, WaterCategory

# Purpose:
# Immutable lookup data for the parameter pipeline. Classification tables are
# priority-ordered (predicate, result) pairs: the first predicate that matches
# the lowercased free-text field wins, so order is significant.

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class GrindBase:
    clicks: float   # Comandante-equivalent clicks
    steps: float    # Fellow Ode dial value

    def shifted(self, clicks_delta: float, secondary_scale: float) -> "GrindBase":
        return GrindBase(self.clicks + clicks_delta, self.steps + clicks_delta * secondary_scale)


@dataclass(frozen=True)
class TempRange:
    min: int
    max: int

    def shifted(self, delta: int) -> "TempRange":
        return TempRange(self.min + delta, self.max + delta)

    def label(self) -> str:
        return f"{self.min}-{self.max}°C"


@dataclass(frozen=True)
class BaseParams:
    grind_base: GrindBase
    temp_base: TempRange
    ratio: float
    brew_style: BrewStyle
    target_time: str
    category: str


def _has(*words: str) -> Predicate:
    return lambda s: any(w in s for w in words)

def _all(*words: str) -> Predicate:
    return lambda s: all(w in s for w in words)

def _always(_: str) -> bool:
    return True


# ---------------- 1. base parameters by processing method ----------------

_HONEY = dict(ratio=16.7, brew_style=BrewStyle.FRUITY, target_time="2:45-3:15", category="honey")

PROCESS_RULES: List[Tuple[str, Predicate, BaseParams]] = [
    ("nitro", _has("nitro", "co2", "co-infused"),
     BaseParams(GrindBase(18, 2.8), TempRange(90, 91), 15.5, BrewStyle.SLOW, "2:45-3:15", "experimental-nitro")),
    ("anaerobic-natural", _all("anaerobic", "natural"),
     BaseParams(GrindBase(20, 3.2), TempRange(91, 92), 16.5, BrewStyle.CONTROLLED, "2:30-3:00", "anaerobic-natural")),
    ("anaerobic-washed", _all("anaerobic", "washed"),
     BaseParams(GrindBase(19, 3.0), TempRange(91, 92), 16.0, BrewStyle.CONTROLLED, "2:30-3:00", "anaerobic-washed")),
    ("carbonic", _has("carbonic"),
     BaseParams(GrindBase(20, 3.3), TempRange(90, 91), 16.0, BrewStyle.SLOW, "2:45-3:15", "carbonic")),
    ("extended-fermentation", _has("extended", "long ferment"),
     BaseParams(GrindBase(21, 3.4), TempRange(91, 92), 16.2, BrewStyle.CONTROLLED, "2:30-3:00", "extended-fermentation")),
    ("yeast", _has("yeast"),
     BaseParams(GrindBase(23, 3.8), TempRange(92, 93), 16.5, BrewStyle.STANDARD, "2:30-3:00", "yeast")),
    ("honey-yellow", _all("honey", "yellow"),
     BaseParams(GrindBase(23, 3.6), TempRange(92, 93), **_HONEY)),
    ("honey-black", _all("honey", "black"),
     BaseParams(GrindBase(26, 4.2), TempRange(93, 94), **_HONEY)),
    ("honey", _has("honey"),
     BaseParams(GrindBase(24, 3.9), TempRange(93, 94), **_HONEY)),
    ("natural", _has("natural"),
     BaseParams(GrindBase(25, 4.1), TempRange(93, 94), 16.7, BrewStyle.FRUITY, "2:45-3:15", "natural")),
    ("washed", _always,
     BaseParams(GrindBase(22, 3.5), TempRange(92, 93), 16.0, BrewStyle.STANDARD, "2:30-3:00", "washed")),
]

# ---------------- 2. altitude ----------------

DEFAULT_ALTITUDE = 1500

# (upper bound exclusive, band, grind delta, temp delta); None = open-ended
ALTITUDE_BANDS: List[Tuple[Optional[int], str, int, int]] = [
    (1200, "low", +2, -1),
    (1400, "mid-low", +1, 0),
    (1600, "mid", 0, 0),
    (1800, "mid-high", -1, 0),
    (None, "high", -2, +1),
]

# secondary (steps) family moves by this fraction of the clicks delta
BEAN_SECONDARY_SCALE = 0.25
WATER_SECONDARY_SCALE = 0.5

# ---------------- 3. cultivar ----------------

CULTIVAR_RULES: List[Tuple[str, Predicate, int, int]] = [
    ("delicate", _has("gesha", "geisha", "sl28", "sl34", "bourbon", "typica"), -1, -1),
    ("robust", _has("pacamara", "maragogype", "catimor", "sarchimor", "robusta"), +1, +1),
    ("balanced", _always, 0, 0),
]

# ---------------- 4. origin ----------------

ORIGIN_RULES: List[Tuple[str, Predicate, int, int]] = [
    ("africa", _has("ethiopia", "kenya", "rwanda", "burundi", "tanzania"), -1, 0),
    ("asia", _has("indonesia", "sumatra", "java", "india", "vietnam", "papua"), +1, +1),
    ("latin-america", _always, 0, 0),
]

# ---------------- 5. water hardness (°dH) ----------------

# (upper bound exclusive, category)
WATER_THRESHOLDS: List[Tuple[float, WaterCategory]] = [
    (7, WaterCategory.VERY_SOFT),
    (14, WaterCategory.SOFT),
    (21, WaterCategory.MEDIUM),
    (28, WaterCategory.HARD),
]

WATER_ADJUSTMENTS: Dict[WaterCategory, Tuple[int, int]] = {
    WaterCategory.VERY_SOFT: (-2, +1),
    WaterCategory.SOFT: (-2, +1),
    WaterCategory.MEDIUM: (0, 0),
    WaterCategory.HARD: (+2, -1),
    WaterCategory.VERY_HARD: (+2, -1),
}

# ---------------- 6. roast age (days since roast) ----------------

ROAST_RESTING_DAYS = 7
ROAST_FADING_DAYS = 30

# ---------------- 7. brew method ----------------

@dataclass(frozen=True)
class MethodOverride:
    clicks_delta: float
    steps_delta: float
    temp_delta: int
    ratio_floor: Optional[float] = None
    ratio_cap: Optional[float] = None
    target_time: Optional[str] = None


METHOD_OVERRIDES: Dict[BrewMethod, MethodOverride] = {
    BrewMethod.CHEMEX: MethodOverride(+4, +1.0, +1, ratio_floor=16.5, target_time="3:30-4:30"),
    BrewMethod.AEROPRESS: MethodOverride(-3, -0.75, -1, ratio_cap=15.0, target_time="1:45-2:15"),
}
