# dripmate_backend/app/brew_engine/recommend.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dripmate_backend.app.models.coffee import Coffee
from dripmate_backend.app.models.environment import Environment
from .grinders import get_grinder_label, project_grind
from .notes import generate_brew_notes
from .pipeline import FinalParameterSet, compute_final_parameters
from .steps import BrewStep, generate_brew_steps
from .tables import TempRange


@dataclass(frozen=True)
class BrewRecommendation:
    parameters: FinalParameterSet
    grind_setting: str
    grinder_label: str
    temperature: str
    ratio_label: str
    ratio_number: float
    dose_g: float
    water_amount_ml: int
    steps: List[BrewStep]
    target_time: str
    notes: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "grind_setting": self.grind_setting,
            "grinder_label": self.grinder_label,
            "temperature": self.temperature,
            "ratio": self.ratio_label,
            "ratio_number": self.ratio_number,
            "dose_g": self.dose_g,
            "water_amount_ml": self.water_amount_ml,
            "steps": [s.as_dict() for s in self.steps],
            "target_time": self.target_time,
            "notes": self.notes,
            "category": self.parameters.category,
            "brew_style": self.parameters.brew_style.value,
            "method": self.parameters.method.value,
            "trace": self.parameters.trace,
        }


def format_temp(temp: TempRange) -> str:
    return temp.label()

def _fmt_number(x: float) -> str:
    return str(int(x)) if float(x).is_integer() else f"{x:g}"

def resolve_dose(coffee: Coffee, environment: Environment) -> float:
    # a stored dose of 0 counts as unset
    dose = coffee.custom_amount or environment.default_dose
    if dose is None or dose <= 0:
        raise ValueError(f"dose must be positive, got {dose!r}")
    return float(dose)

def compute_brew_parameters(coffee: Coffee, environment: Environment) -> BrewRecommendation:
    """
    Full recommendation for one coffee: pipeline, grinder projection (with the
    coffee's grind offset), temperature (custom override wins), pour schedule.
    """
    dose = resolve_dose(coffee, environment)
    params = compute_final_parameters(coffee, environment)
    steps = generate_brew_steps(dose, params.ratio, params.brew_style, params.method)
    return BrewRecommendation(
        parameters=params,
        grind_setting=project_grind(params.grind_base, environment.grinder, coffee.grind_offset or 0),
        grinder_label=get_grinder_label(environment.grinder),
        temperature=coffee.custom_temp or format_temp(params.temp_base),
        ratio_label=f"1:{_fmt_number(params.ratio)} ({_fmt_number(dose)}g)",
        ratio_number=params.ratio,
        dose_g=dose,
        water_amount_ml=int(dose * params.ratio + 0.5),
        steps=steps,
        target_time=params.target_time,
        notes=generate_brew_notes(params),
    )

def current_temperature(coffee: Coffee, environment: Environment) -> str:
    """The temperature string a brewer would use right now (override or recommended range)."""
    if coffee.custom_temp:
        return coffee.custom_temp
    return format_temp(compute_final_parameters(coffee, environment).temp_base)

__all__ = [
    "BrewRecommendation",
    "format_temp",
    "resolve_dose",
    "compute_brew_parameters",
    "current_temperature",
]
