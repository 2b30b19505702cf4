# dripmate_backend/app/routers/feedback.py
from __future__ import annotations
from fastapi import APIRouter, HTTPException, status
from typing import Any, Dict, Optional

from dripmate_backend.app.brew_engine.recommend import compute_brew_parameters
from dripmate_backend.app.models.feedback import AdjustIn, FeedbackIn
from dripmate_backend.app.services.data_stores import save_coffee_list
from dripmate_backend.app.services.feedback.adjustments import (
    apply_suggestion,
    describe_history_entry,
    record_manual_adjustment,
    reset_adjustments,
)
from dripmate_backend.app.services.feedback.suggestion import (
    Suggestion,
    compute_suggestion,
    select_feedback,
    slider_value_to_feedback,
)
from dripmate_backend.app.services.router_helpers.coffee_helpers import (
    engine_errors, load_with_coffee, unprocessable,
)

router = APIRouter(prefix="/feedback", tags=["feedback"])

def _suggestion_out(s: Optional[Suggestion]) -> Optional[Dict[str, Any]]:
    return s.as_dict() if s is not None else None

def _suggest(coffee, env) -> Optional[Suggestion]:
    with engine_errors():
        return compute_suggestion(coffee, env)

def _current(coffee, env) -> Dict[str, Any]:
    with engine_errors():
        rec = compute_brew_parameters(coffee, env)
    return {"grind": rec.grind_setting, "temp": rec.temperature}

# What it does:
# Record one tasting tag (level or slider) and return the resulting suggestion.
@router.put("/{coffee_id}")
def put_feedback(coffee_id: str, body: FeedbackIn) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    value = body.value if body.value is not None else slider_value_to_feedback(body.slider)
    try:
        changed = select_feedback(coffee, body.category, value)
    except ValueError as e:
        raise unprocessable(e)
    if changed:
        save_coffee_list(coffees)
    return {"ok": True, "feedback": coffee.feedback, "suggestion": _suggestion_out(_suggest(coffee, env))}

@router.get("/{coffee_id}/suggestion")
def get_suggestion(coffee_id: str) -> Dict[str, Any]:
    _, coffee, env = load_with_coffee(coffee_id)
    return {"ok": True, "suggestion": _suggestion_out(_suggest(coffee, env))}

# What it does:
# Apply the current suggestion: grind offset adds up, temp override replaces, tags are cleared.
@router.post("/{coffee_id}/apply")
def apply(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    s = _suggest(coffee, env)
    if s is None or s.balanced:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="no adjustment to apply")
    with engine_errors():
        entry = apply_suggestion(coffee, env, s)
    save_coffee_list(coffees)
    return {"ok": True, "entry": entry.model_dump(by_alias=True, exclude_none=True), "current": _current(coffee, env)}

# What it does:
# Manual +/- on grind (offset steps) or temperature (degrees).
@router.post("/{coffee_id}/adjust")
def adjust(coffee_id: str, body: AdjustIn) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    try:
        entry = record_manual_adjustment(coffee, env, body.kind, body.delta)
    except ValueError as e:
        raise unprocessable(e)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="current temperature has no numeric value")
    save_coffee_list(coffees)
    return {"ok": True, "entry": entry.model_dump(by_alias=True, exclude_none=True), "current": _current(coffee, env)}

# What it does:
# Drop every adjustment and re-anchor the baseline to the current environment.
@router.post("/{coffee_id}/reset")
def reset(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    with engine_errors():
        entry = reset_adjustments(coffee, env)
    save_coffee_list(coffees)
    return {
        "ok": True,
        "entry": entry.model_dump(by_alias=True, exclude_none=True),
        "initial": {"grind": coffee.initial_grind, "temp": coffee.initial_temp},
    }

@router.get("/{coffee_id}/history")
def history(coffee_id: str) -> Dict[str, Any]:
    _, coffee, _ = load_with_coffee(coffee_id)
    items = []
    for e in coffee.feedback_history or []:
        row = e.model_dump(by_alias=True, exclude_none=True)
        row["summary"] = describe_history_entry(e)
        items.append(row)
    return {"ok": True, "history": items}
