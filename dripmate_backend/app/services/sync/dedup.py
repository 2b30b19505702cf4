# dripmate_backend/app/services/sync/dedup.py
from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Purpose:
# Inbound coffee lists (remote backend, imports) arrive as raw camelCase dicts
# that may lack ids or repeat records. Normalize and dedupe them before they
# become Coffee models.

log = logging.getLogger("dripmate.sync")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

_UNSAFE = re.compile(r"[^a-z0-9|:-]")

def _lower(v: Any) -> str:
    return str(v or "").strip().lower()

def create_stable_coffee_id(coffee: Dict[str, Any], fallback_index: int = 0, now: Optional[datetime] = None) -> str:
    if coffee.get("id"):
        return str(coffee["id"])
    stable_date = str(coffee.get("addedDate") or coffee.get("savedAt") or coffee.get("createdAt") or "").strip()
    if not stable_date:
        stable_date = (now or datetime.now(timezone.utc)).isoformat()
    seed = "|".join([
        _lower(coffee.get("name")),
        _lower(coffee.get("roaster")),
        _lower(coffee.get("origin")),
        stable_date,
        str(fallback_index),
    ])
    safe = _UNSAFE.sub("", seed)
    return f"coffee-{safe or int(time.time() * 1000)}"

def normalize_coffee_record(raw: Optional[Dict[str, Any]], fallback_index: int = 0) -> Dict[str, Any]:
    """Copy with a stable id, a dict `feedback` and a list `feedbackHistory`."""
    coffee = dict(raw or {})
    coffee["id"] = create_stable_coffee_id(coffee, fallback_index)
    if not isinstance(coffee.get("feedback"), dict):
        coffee["feedback"] = {}
    if not isinstance(coffee.get("feedbackHistory"), list):
        coffee["feedbackHistory"] = []
    return coffee

def fallback_key(coffee: Dict[str, Any]) -> str:
    return "|".join([
        _lower(coffee.get("name")),
        _lower(coffee.get("roaster")),
        _lower(coffee.get("origin")),
        _lower(coffee.get("addedDate") or coffee.get("savedAt")),
    ])

def dedupe_coffees(coffees: List[Dict[str, Any]], source: str = "backend") -> List[Dict[str, Any]]:
    """
    Keep the first record per key. Records that arrived with an id are keyed
    by it; the rest by name|roaster|origin|addedDate. Idempotent.
    """
    out: List[Dict[str, Any]] = []
    seen = set()
    removed = 0
    for index, raw in enumerate(coffees or []):
        if not isinstance(raw, dict):
            removed += 1
            continue
        had_id = bool(raw.get("id"))
        coffee = normalize_coffee_record(raw, index)
        key = str(coffee["id"]) if had_id else (fallback_key(coffee) or f"index:{index}")
        if key in seen:
            removed += 1
            continue
        seen.add(key)
        out.append(coffee)
    if removed:
        noun = "entry" if removed == 1 else "entries"
        log.warning(f"[sync] deduplication removed {removed} duplicate coffee {noun} ({source})")
    return out

def has_feedback_history_coverage(coffees: List[Dict[str, Any]]) -> bool:
    if not coffees:
        return True
    return any(isinstance(c, dict) and isinstance(c.get("feedbackHistory"), list) for c in coffees)

def merge_inbound(local: List[Dict[str, Any]], remote: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Remote list replaces local, unless the remote payload looks stripped
    (no record carries feedbackHistory) and local has data to lose.
    """
    normalized = dedupe_coffees(remote, "merge-remote")
    looks_incomplete = bool(normalized) and not has_feedback_history_coverage(remote)
    if looks_incomplete and local:
        log.warning("[sync] remote coffees miss feedbackHistory; keeping local data")
        return list(local)
    return normalized

__all__ = [
    "create_stable_coffee_id",
    "normalize_coffee_record",
    "fallback_key",
    "dedupe_coffees",
    "has_feedback_history_coverage",
    "merge_inbound",
]
