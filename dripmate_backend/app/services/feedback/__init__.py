# dripmate_backend/app/services/feedback/__init__.py
from __future__ import annotations

from .suggestion import (
    Suggestion,
    SuggestionHideTimers,
    compute_suggestion,
    is_balanced,
    select_feedback,
    slider_value_to_feedback,
)
from .adjustments import (
    apply_suggestion,
    describe_history_entry,
    ensure_initial_values,
    get_initial_brew_values,
    migrate_initial_values,
    record_manual_adjustment,
    reset_adjustments,
)

__all__ = [
    "Suggestion", "SuggestionHideTimers", "compute_suggestion", "is_balanced",
    "select_feedback", "slider_value_to_feedback",
    "apply_suggestion", "describe_history_entry", "ensure_initial_values",
    "get_initial_brew_values", "migrate_initial_values",
    "record_manual_adjustment", "reset_adjustments",
]
