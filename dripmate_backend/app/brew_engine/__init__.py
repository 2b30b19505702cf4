# dripmate_backend/app/brew_engine/__init__.py
from __future__ import annotations

# Public surface of the brew engine; callers import from here.

from .pipeline import FinalParameterSet, compute_final_parameters, parse_altitude, water_category_for_value
from .grinders import get_grinder_label, get_profile, migrate_grinder_key, project_grind
from .steps import BrewStep, build_step_timeline, generate_brew_steps, parse_time_to_seconds
from .freshness import freshness_badge, roast_stage
from .notes import generate_brew_notes
from .recommend import BrewRecommendation, compute_brew_parameters, current_temperature, format_temp

__all__ = [
    # pipeline
    "FinalParameterSet", "compute_final_parameters", "parse_altitude", "water_category_for_value",
    # grinders
    "get_grinder_label", "get_profile", "migrate_grinder_key", "project_grind",
    # steps
    "BrewStep", "build_step_timeline", "generate_brew_steps", "parse_time_to_seconds",
    # freshness / notes
    "freshness_badge", "roast_stage", "generate_brew_notes",
    # facade
    "BrewRecommendation", "compute_brew_parameters", "current_temperature", "format_temp",
]
