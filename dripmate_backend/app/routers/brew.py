# dripmate_backend/app/routers/brew.py
from __future__ import annotations
from fastapi import APIRouter, HTTPException, status
from typing import Any, Dict

from dripmate_backend.app.brew_engine.recommend import compute_brew_parameters
from dripmate_backend.app.brew_engine.steps import build_step_timeline
from dripmate_backend.app.models.coffee import CoffeeIn
from dripmate_backend.app.services.brew_timer import TimerRegistry
from dripmate_backend.app.services.data_stores import load_environment, save_coffee_list
from dripmate_backend.app.services.feedback.adjustments import ensure_initial_values
from dripmate_backend.app.services.router_helpers.coffee_helpers import engine_errors, load_with_coffee

router = APIRouter(prefix="/brew", tags=["brew"])

# one timer per coffee id for this process
TIMERS = TimerRegistry()

# What it does:
# Recommendation for a coffee body that is not stored (e.g. while typing a new bag).
@router.post("/preview")
def preview(body: CoffeeIn) -> Dict[str, Any]:
    with engine_errors():
        rec = compute_brew_parameters(body, load_environment())
    return {"ok": True, "recommendation": rec.as_dict()}

# What it does:
# Full recommendation for a stored coffee. Fills the baseline anchors on first view.
@router.get("/{coffee_id}")
def recommend(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    with engine_errors():
        if ensure_initial_values(coffee, env):
            save_coffee_list(coffees)
        rec = compute_brew_parameters(coffee, env)
    return {
        "ok": True,
        "coffee_id": coffee.id,
        "recommendation": rec.as_dict(),
        "initial": {"grind": coffee.initial_grind, "temp": coffee.initial_temp},
    }

@router.get("/{coffee_id}/timeline")
def timeline(coffee_id: str) -> Dict[str, Any]:
    _, coffee, env = load_with_coffee(coffee_id)
    with engine_errors():
        rec = compute_brew_parameters(coffee, env)
    return {"ok": True, "steps": [s.as_dict() for s in build_step_timeline(rec.steps)]}

# ---------------- timer ----------------

@router.post("/{coffee_id}/timer/start")
def timer_start(coffee_id: str) -> Dict[str, Any]:
    _, coffee, env = load_with_coffee(coffee_id)
    with engine_errors():
        rec = compute_brew_parameters(coffee, env)
    return {"ok": True, "timer": TIMERS.start(coffee_id, rec.steps)}

@router.post("/{coffee_id}/timer/pause")
def timer_pause(coffee_id: str) -> Dict[str, Any]:
    snap = TIMERS.toggle_pause(coffee_id)
    if snap is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no timer running for this coffee")
    return {"ok": True, "timer": snap}

@router.get("/{coffee_id}/timer")
def timer_state(coffee_id: str) -> Dict[str, Any]:
    snap = TIMERS.tick(coffee_id)
    if snap is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no timer running for this coffee")
    return {"ok": True, "timer": snap}

@router.delete("/{coffee_id}/timer")
def timer_reset(coffee_id: str) -> Dict[str, Any]:
    return {"ok": True, "removed": TIMERS.reset(coffee_id)}
