# dripmate_backend/app/brew_engine/pipeline.py
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from dripmate_backend.app.models.coffee import Coffee
from dripmate_backend.app.models.environment import Environment, WaterHardness
from dripmate_backend.app.schemas import BrewMethod, BrewStyle, RoastStage, WaterCategory
from .freshness import days_since_roast, roast_stage
from .tables import (
    ALTITUDE_BANDS,
    BEAN_SECONDARY_SCALE,
    CULTIVAR_RULES,
    DEFAULT_ALTITUDE,
    METHOD_OVERRIDES,
    ORIGIN_RULES,
    PROCESS_RULES,
    WATER_ADJUSTMENTS,
    WATER_SECONDARY_SCALE,
    WATER_THRESHOLDS,
    GrindBase,
    TempRange,
)

# Purpose:
# Fold a coffee's metadata and the brewing environment into one Final
# Parameter Set. Stages run in a fixed order and each one records what it
# changed in `trace`; notes and feedback read that trace later.


@dataclass(frozen=True)
class FinalParameterSet:
    grind_base: GrindBase
    temp_base: TempRange
    ratio: float
    brew_style: BrewStyle
    target_time: str
    category: str
    method: BrewMethod = BrewMethod.V60
    trace: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def with_stage(self, stage: str, info: Dict[str, Any], **changes: Any) -> "FinalParameterSet":
        trace = dict(self.trace)
        trace[stage] = info
        return replace(self, trace=trace, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "grind_base": {"clicks": self.grind_base.clicks, "steps": self.grind_base.steps},
            "temp_base": {"min": self.temp_base.min, "max": self.temp_base.max},
            "ratio": self.ratio,
            "brew_style": self.brew_style.value,
            "target_time": self.target_time,
            "category": self.category,
            "method": self.method.value,
            "trace": self.trace,
        }


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().lower()

# ---------------- stage 1: processing method ----------------

def base_params_for_process(process: Optional[str]) -> FinalParameterSet:
    p = _norm(process)
    for rule_id, matches, base in PROCESS_RULES:
        if matches(p):
            return FinalParameterSet(
                grind_base=base.grind_base,
                temp_base=base.temp_base,
                ratio=base.ratio,
                brew_style=base.brew_style,
                target_time=base.target_time,
                category=base.category,
                trace={"process": {"category": base.category, "matched": rule_id}},
            )
    raise AssertionError("PROCESS_RULES must end with a catch-all rule")

# ---------------- stage 2: altitude ----------------

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")

def parse_altitude(raw: Optional[str]) -> int:
    """Leading integer of the altitude text ("1800 masl" -> 1800); 1500 when missing or zero."""
    m = _LEADING_INT.match(str(raw or ""))
    value = int(m.group(0)) if m else 0
    return value or DEFAULT_ALTITUDE

def altitude_band(altitude: int):
    for upper, band, grind_adjust, temp_adjust in ALTITUDE_BANDS:
        if upper is None or altitude < upper:
            return band, grind_adjust, temp_adjust
    raise AssertionError("ALTITUDE_BANDS must end with an open band")

def adjust_for_altitude(params: FinalParameterSet, altitude_raw: Optional[str]) -> FinalParameterSet:
    altitude = parse_altitude(altitude_raw)
    band, grind_adjust, temp_adjust = altitude_band(altitude)
    return params.with_stage(
        "altitude",
        {"altitude": altitude, "band": band, "grind_adjust": grind_adjust, "temp_adjust": temp_adjust},
        grind_base=params.grind_base.shifted(grind_adjust, BEAN_SECONDARY_SCALE),
        temp_base=params.temp_base.shifted(temp_adjust),
    )

# ---------------- stage 3 + 4: cultivar / origin ----------------

def _classify(rules, text: Optional[str]):
    t = _norm(text)
    for label, matches, grind_adjust, temp_adjust in rules:
        if matches(t):
            return label, grind_adjust, temp_adjust
    raise AssertionError("classification tables must end with a catch-all rule")

def adjust_for_cultivar(params: FinalParameterSet, cultivar: Optional[str]) -> FinalParameterSet:
    category, grind_adjust, temp_adjust = _classify(CULTIVAR_RULES, cultivar)
    return params.with_stage(
        "cultivar",
        {"category": category, "grind_adjust": grind_adjust, "temp_adjust": temp_adjust},
        grind_base=params.grind_base.shifted(grind_adjust, BEAN_SECONDARY_SCALE),
        temp_base=params.temp_base.shifted(temp_adjust),
    )

def adjust_for_origin(params: FinalParameterSet, origin: Optional[str]) -> FinalParameterSet:
    region, grind_adjust, temp_adjust = _classify(ORIGIN_RULES, origin)
    return params.with_stage(
        "origin",
        {"region": region, "grind_adjust": grind_adjust, "temp_adjust": temp_adjust},
        grind_base=params.grind_base.shifted(grind_adjust, BEAN_SECONDARY_SCALE),
        temp_base=params.temp_base.shifted(temp_adjust),
    )

# ---------------- stage 5: water hardness ----------------

def water_category_for_value(value: float) -> WaterCategory:
    for upper, category in WATER_THRESHOLDS:
        if value < upper:
            return category
    return WaterCategory.VERY_HARD

def water_category(hardness: WaterHardness) -> WaterCategory:
    return hardness.category or water_category_for_value(hardness.value)

def adjust_for_water_hardness(params: FinalParameterSet, hardness: Optional[WaterHardness]) -> FinalParameterSet:
    if hardness is None:
        return params
    category = water_category(hardness)
    grind_adjust, temp_adjust = WATER_ADJUSTMENTS[category]
    return params.with_stage(
        "water",
        {"category": category.value, "value": hardness.value, "grind_adjust": grind_adjust, "temp_adjust": temp_adjust},
        grind_base=params.grind_base.shifted(grind_adjust, WATER_SECONDARY_SCALE),
        temp_base=params.temp_base.shifted(temp_adjust),
    )

# ---------------- stage 6: roast age ----------------

_ROAST_TEMP = {RoastStage.RESTING: -1, RoastStage.FADING: +1}

def adjust_for_roast_age(params: FinalParameterSet, roast_date: Optional[str], today=None) -> FinalParameterSet:
    stage = roast_stage(roast_date, today)
    # at most one degree either way; processing stays the dominant signal
    temp_adjust = _ROAST_TEMP.get(stage, 0)
    return params.with_stage(
        "roast",
        {"stage": stage.value, "days": days_since_roast(roast_date, today), "temp_adjust": temp_adjust},
        temp_base=params.temp_base.shifted(temp_adjust),
    )

# ---------------- stage 7: brew method ----------------

def adjust_for_method(params: FinalParameterSet, method: BrewMethod) -> FinalParameterSet:
    override = METHOD_OVERRIDES.get(method)
    if override is None:
        return params.with_stage("method", {"method": method.value}, method=method)

    ratio = params.ratio
    if override.ratio_floor is not None:
        ratio = max(ratio, override.ratio_floor)
    if override.ratio_cap is not None:
        ratio = min(ratio, override.ratio_cap)

    grind = GrindBase(params.grind_base.clicks + override.clicks_delta, params.grind_base.steps + override.steps_delta)
    return params.with_stage(
        "method",
        {"method": method.value, "grind_adjust": override.clicks_delta, "temp_adjust": override.temp_delta,
         "ratio_before": params.ratio, "ratio_after": ratio},
        method=method,
        grind_base=grind,
        temp_base=params.temp_base.shifted(override.temp_delta),
        ratio=ratio,
        target_time=override.target_time or params.target_time,
    )

# ---------------- full fold ----------------

def compute_final_parameters(coffee: Coffee, environment: Environment) -> FinalParameterSet:
    """
    Pure and total: malformed or missing coffee fields resolve to defaults
    (washed base, 1500 masl, balanced cultivar, latin-america origin, unknown roast age).
    """
    params = base_params_for_process(coffee.process)
    params = adjust_for_altitude(params, coffee.altitude)
    params = adjust_for_cultivar(params, coffee.cultivar)
    params = adjust_for_origin(params, coffee.origin)
    params = adjust_for_water_hardness(params, environment.active_water_hardness)
    params = adjust_for_roast_age(params, coffee.roast_date, environment.today)
    params = adjust_for_method(params, environment.method)
    return params

__all__ = [
    "FinalParameterSet",
    "base_params_for_process",
    "parse_altitude",
    "altitude_band",
    "adjust_for_altitude",
    "adjust_for_cultivar",
    "adjust_for_origin",
    "water_category_for_value",
    "water_category",
    "adjust_for_water_hardness",
    "adjust_for_roast_age",
    "adjust_for_method",
    "compute_final_parameters",
]
