# dripmate_backend/app/routers/settings.py
from __future__ import annotations
from fastapi import APIRouter
from typing import Any, Dict

from dripmate_backend.app.brew_engine.grinders import get_grinder_label, list_profiles, migrate_grinder_key
from dripmate_backend.app.models.environment import Settings, SettingsUpdate, ZipCodeIn, coerce_method
from dripmate_backend.app.services import water_hardness as wh
from dripmate_backend.app.services.data_stores import load_settings, save_settings
from dripmate_backend.app.services.router_helpers.coffee_helpers import unprocessable

router = APIRouter(prefix="/settings", tags=["settings"])

def _settings_out(s: Settings) -> Dict[str, Any]:
    out = s.model_dump(by_alias=True, exclude_none=True, exclude={"token"}, mode="json")
    out["hasToken"] = bool(s.token)
    out["grinderLabel"] = get_grinder_label(s.grinder)
    active = s.active_water_hardness
    out["activeWaterHardness"] = active.model_dump(by_alias=True, exclude_none=True, mode="json") if active else None
    return out

@router.get("")
def get_settings() -> Dict[str, Any]:
    return {"ok": True, "settings": _settings_out(load_settings())}

@router.get("/grinders")
def get_grinders() -> Dict[str, Any]:
    return {
        "ok": True,
        "grinders": [{"key": p.key.value, "label": p.label, "unit": p.unit.value} for p in list_profiles()],
    }

# What it does:
# Partial update of grinder / method / dose / manual hardness / token.
@router.put("")
def put_settings(body: SettingsUpdate) -> Dict[str, Any]:
    s = load_settings()
    if body.grinder is not None:
        s.grinder = migrate_grinder_key(body.grinder)
    if body.method is not None:
        s.method = coerce_method(body.method)
    if body.default_dose is not None:
        s.default_dose = body.default_dose
    if body.manual_water_hardness is not None:
        try:
            s.manual_water_hardness = wh.manual_hardness(body.manual_water_hardness)
        except ValueError as e:
            raise unprocessable(e)
    if body.token is not None:
        s.token = body.token.strip() or None
    save_settings(s)
    return {"ok": True, "settings": _settings_out(s)}

# What it does:
# Postal-code lookup; stored as the fallback hardness (a manual value still wins).
@router.post("/water/zip")
def set_zip(body: ZipCodeIn) -> Dict[str, Any]:
    try:
        hardness = wh.lookup(body.zip_code)
    except ValueError as e:
        raise unprocessable(e)
    s = load_settings()
    s.api_water_hardness = hardness
    s.zip_code = body.zip_code.strip()
    save_settings(s)
    return {
        "ok": True,
        "hardness": hardness.model_dump(by_alias=True, exclude_none=True, mode="json"),
        "description": wh.describe_category(hardness.category),
        "manualOverride": s.manual_water_hardness is not None,
        "settings": _settings_out(s),
    }

@router.delete("/water/manual")
def clear_manual() -> Dict[str, Any]:
    s = load_settings()
    s.manual_water_hardness = None
    save_settings(s)
    return {"ok": True, "settings": _settings_out(s)}
