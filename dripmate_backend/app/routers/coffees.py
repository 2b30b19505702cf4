# dripmate_backend/app/routers/coffees.py
from __future__ import annotations
from fastapi import APIRouter, HTTPException, status
from typing import Any, Dict

from dripmate_backend.app.models.coffee import CoffeeIn, CoffeePatch
from dripmate_backend.app.services import coffee_list as cl
from dripmate_backend.app.services.data_stores import load_coffee_list, load_environment, save_coffee_list
from dripmate_backend.app.services.feedback.adjustments import ensure_initial_values
from dripmate_backend.app.services.router_helpers.coffee_helpers import (
    coffee_card, engine_errors, load_with_coffee, unprocessable,
)

router = APIRouter(prefix="/coffees", tags=["coffees"])

# What it does:
# Active coffees, favorites first then newest.
@router.get("")
def list_coffees() -> Dict[str, Any]:
    env = load_environment()
    return {"ok": True, "coffees": [coffee_card(c, env) for c in cl.active_coffees(load_coffee_list())]}

# What it does:
# Add a bag (name, origin and process required). Baseline anchors are set at once.
@router.post("", status_code=status.HTTP_201_CREATED)
def create_coffee(body: CoffeeIn) -> Dict[str, Any]:
    coffees = load_coffee_list()
    env = load_environment()
    try:
        coffee = cl.add_coffee(coffees, body)
    except ValueError as e:
        raise unprocessable(e)
    with engine_errors():
        ensure_initial_values(coffee, env)
    save_coffee_list(coffees)
    return {"ok": True, "coffee": coffee_card(coffee, env)}

# What it does:
# Soft-deleted coffees that can still be restored.
@router.get("/bin")
def list_bin() -> Dict[str, Any]:
    env = load_environment()
    return {"ok": True, "coffees": [coffee_card(c, env) for c in cl.recovery_bin(load_coffee_list())]}

@router.get("/{coffee_id}")
def get_coffee(coffee_id: str) -> Dict[str, Any]:
    _, coffee, env = load_with_coffee(coffee_id)
    return {"ok": True, "coffee": coffee_card(coffee, env)}

# What it does:
# Edit descriptive fields, dose or roast date.
@router.patch("/{coffee_id}")
def patch_coffee(coffee_id: str, patch: CoffeePatch) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    cl.update_coffee(coffees, coffee_id, patch)
    save_coffee_list(coffees)
    return {"ok": True, "coffee": coffee_card(coffee, env)}

# What it does:
# Move to the recovery bin.
@router.delete("/{coffee_id}")
def delete_coffee(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, _ = load_with_coffee(coffee_id)
    cl.soft_delete(coffees, coffee_id)
    save_coffee_list(coffees)
    return {"ok": True, "id": coffee.id, "deleted": True}

@router.post("/{coffee_id}/restore")
def restore_coffee(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    cl.restore(coffees, coffee_id)
    save_coffee_list(coffees)
    return {"ok": True, "coffee": coffee_card(coffee, env)}

# What it does:
# Remove for good. Only coffees already in the bin can be purged.
@router.delete("/{coffee_id}/permanent")
def purge_coffee(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, _ = load_with_coffee(coffee_id)
    if not coffee.deleted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="move the coffee to the bin first")
    cl.permanent_delete(coffees, coffee_id)
    save_coffee_list(coffees)
    return {"ok": True, "id": coffee_id}

@router.post("/{coffee_id}/favorite")
def favorite_coffee(coffee_id: str) -> Dict[str, Any]:
    coffees, coffee, env = load_with_coffee(coffee_id)
    cl.toggle_favorite(coffees, coffee_id)
    save_coffee_list(coffees)
    return {"ok": True, "coffee": coffee_card(coffee, env)}
