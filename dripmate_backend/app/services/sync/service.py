# dripmate_backend/app/services/sync/service.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from dripmate_backend.app.brew_engine.grinders import migrate_grinder_key
from dripmate_backend.app.models.coffee import Coffee
from dripmate_backend.app.models.environment import WaterHardness
from dripmate_backend.app.services.data_stores import (
    load_coffee_list,
    load_settings,
    save_coffee_list,
    save_settings,
)
from dripmate_backend.app.services.water_hardness import category_for_value
from .backend_client import BackendSyncClient
from .dedup import log, merge_inbound

# Purpose:
# Pull/push orchestration between the local JSON stores and the remote
# backend. Failures are reported in the result dict, never raised.

def client_from_settings(**kwargs: Any) -> BackendSyncClient:
    s = load_settings()
    return BackendSyncClient(token=s.token, device_id=s.device_id, **kwargs)

def _to_models(rows: List[Dict[str, Any]]) -> Tuple[List[Coffee], List[Dict[str, Any]]]:
    """Validated coffees plus the rows that must be stored as received."""
    out: List[Coffee] = []
    raw: List[Dict[str, Any]] = []
    for row in rows:
        try:
            out.append(Coffee.model_validate(row))
        except ValidationError as e:
            log.warning(f"[sync] storing unreadable remote coffee {row.get('id')!r} as received: {e.error_count()} errors")
            raw.append(row)
    return out, raw

def pull_from_backend(client: BackendSyncClient) -> Dict[str, Any]:
    status = client.check_user_status()
    if not status.get("valid"):
        log.info(f"[sync] pull skipped: {status.get('error')}")
        return {"ok": False, "valid": False, "error": status.get("error")}

    settings = load_settings()
    changed_settings = False

    remote_grinder = client.fetch_grinder()
    if remote_grinder:
        settings.grinder = migrate_grinder_key(remote_grinder)
        changed_settings = True

    remote_hardness = client.fetch_water_hardness()
    if remote_hardness is not None:
        settings.manual_water_hardness = WaterHardness(
            value=remote_hardness,
            category=category_for_value(remote_hardness),
            region="Manual Entry",
            source="User Input (Synced)",
            is_manual=True,
        )
        changed_settings = True

    if changed_settings:
        save_settings(settings)

    coffees_updated = False
    count = None
    remote = client.fetch_coffees()
    if isinstance(remote, list):
        local = [c.to_wire() for c in load_coffee_list()]
        merged = merge_inbound(local, remote)
        if merged != local:
            models, raw = _to_models(merged)
            save_coffee_list(models, passthrough=raw)
            coffees_updated = True
            count = len(models) + len(raw)

    return {
        "ok": True,
        "valid": True,
        "user": status.get("user"),
        "grinder": settings.grinder.value,
        "coffees_updated": coffees_updated,
        "coffee_count": count,
    }

def push_to_backend(client: BackendSyncClient) -> Dict[str, Any]:
    settings = load_settings()
    coffees = [c.to_wire() for c in load_coffee_list()]
    result = {
        "coffees": client.push_coffees(coffees),
        "grinder": client.push_grinder(settings.grinder.value),
        "water_hardness": None,
    }
    if settings.manual_water_hardness is not None:
        result["water_hardness"] = client.push_water_hardness(settings.manual_water_hardness.value)
    result["ok"] = bool(result["coffees"])
    return result

__all__ = ["client_from_settings", "pull_from_backend", "push_to_backend"]
