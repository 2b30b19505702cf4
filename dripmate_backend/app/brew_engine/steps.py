# dripmate_backend/app/brew_engine/steps.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from dripmate_backend.app.schemas import BrewMethod, BrewStyle

# Purpose:
# Turn (dose, ratio, style, method) into a timed pour schedule, and the
# schedule into a timeline the brew timer can walk.

FINAL_STEP_SECONDS = 60


@dataclass(frozen=True)
class BrewStep:
    time: str      # "M:SS" offset from brew start
    action: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class TimelineStep:
    index: int
    time: str
    action: str
    start_seconds: int
    end_seconds: int
    duration: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _g(x: float) -> int:
    # nearest gram, halves away from zero
    return int(x + 0.5)

def _v60_steps(dose: float, water: int, style: BrewStyle) -> List[BrewStep]:
    if style == BrewStyle.SLOW:
        bloom = _g(dose * 3.5)
        return [
            BrewStep("0:00", f"Bloom: {bloom}g water, wait 45 sec"),
            BrewStep("0:45", f"To {_g(water * 0.45)}g: Very slow circular pour"),
            BrewStep("1:30", f"To {_g(water * 0.75)}g: Continue slowly"),
            BrewStep("2:15", f"To {water}g: Final pour"),
        ]
    bloom = _g(dose * 3)
    if style == BrewStyle.FRUITY:
        return [
            BrewStep("0:00", f"Bloom: {bloom}g, create crater, 45 sec"),
            BrewStep("0:45", f"To {_g(water * 0.52)}g: Pour slowly"),
            BrewStep("1:20", f"To {_g(water * 0.84)}g: Concentric circles"),
            BrewStep("1:50", f"To {water}g: Final pour"),
        ]
    # standard & controlled
    return [
        BrewStep("0:00", f"Bloom: {bloom}g water, 30-40 sec"),
        BrewStep("0:40", f"To {_g(water * 0.5)}g: Pour evenly"),
        BrewStep("1:15", f"To {_g(water * 0.83)}g: Concentric circles"),
        BrewStep("1:45", f"To {water}g: Final pour"),
    ]

def _chemex_steps(dose: float, water: int) -> List[BrewStep]:
    return [
        BrewStep("0:00", f"Bloom: {_g(dose * 3)}g water, wait 45 sec"),
        BrewStep("0:45", f"To {_g(water * 0.4)}g: Slow spiral pour"),
        BrewStep("1:45", f"To {_g(water * 0.7)}g: Keep the bed level"),
        BrewStep("2:45", f"To {water}g: Final pour, let it drain"),
    ]

def _aeropress_steps(water: int) -> List[BrewStep]:
    return [
        BrewStep("0:00", f"Inverted: bloom with {_g(water * 0.2)}g water"),
        BrewStep("0:30", f"Fill to {water}g, stir gently"),
        BrewStep("0:45", "Cap and steep"),
        BrewStep("1:45", "Flip and press slowly (30 sec)"),
    ]

def generate_brew_steps(
    dose_g: float,
    ratio: float,
    brew_style: BrewStyle,
    method: BrewMethod = BrewMethod.V60,
) -> List[BrewStep]:
    if dose_g is None or dose_g <= 0:
        raise ValueError(f"dose must be positive, got {dose_g!r}")
    if ratio is None or ratio <= 0:
        raise ValueError(f"ratio must be positive, got {ratio!r}")

    water = _g(dose_g * ratio)
    if method == BrewMethod.AEROPRESS:
        return _aeropress_steps(water)
    if method == BrewMethod.CHEMEX:
        return _chemex_steps(dose_g, water)
    return _v60_steps(dose_g, water, brew_style)

# ---------------- timeline ----------------

def parse_time_to_seconds(time_str: str) -> int:
    """'1:45' -> 105. Missing or non-numeric parts count as zero."""
    parts = (time_str or "").split(":")

    def _int(s: str) -> int:
        try:
            return int(s.strip())
        except ValueError:
            return 0

    minutes = _int(parts[0]) if parts else 0
    seconds = _int(parts[1]) if len(parts) > 1 else 0
    return minutes * 60 + seconds

def build_step_timeline(steps: List[BrewStep]) -> List[TimelineStep]:
    if not steps:
        return []
    starts = [parse_time_to_seconds(s.time) for s in steps]
    total = starts[-1] + FINAL_STEP_SECONDS
    out: List[TimelineStep] = []
    for i, step in enumerate(steps):
        end = starts[i + 1] if i < len(steps) - 1 else total
        out.append(TimelineStep(
            index=i,
            time=step.time,
            action=step.action,
            start_seconds=starts[i],
            end_seconds=end,
            duration=end - starts[i],
        ))
    return out

__all__ = [
    "BrewStep",
    "TimelineStep",
    "generate_brew_steps",
    "parse_time_to_seconds",
    "build_step_timeline",
]
