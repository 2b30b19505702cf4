# dripmate_backend/app/services/data_stores/coffees.py
from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from dripmate_backend.app.config.paths import path_under_data
from dripmate_backend.app.models.coffee import Coffee
from .io_utils import read_json, write_json

log = logging.getLogger("dripmate.store")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

_IO_LOCK = RLock()
COFFEES_FILE = "coffees.json"

def coffees_path() -> Path:
    # resolved per call so DATA_DIR can change under tests
    return path_under_data(COFFEES_FILE)

def _rows(obj: Any) -> List[Any]:
    if isinstance(obj, dict):
        obj = obj.get("coffees", [])
    return obj if isinstance(obj, list) else []

def _parse(row: Any) -> Optional[Coffee]:
    if not isinstance(row, dict):
        return None
    try:
        return Coffee.model_validate(row)
    except ValidationError as e:
        log.warning(f"[store] unreadable coffee record {row.get('id')!r}: {e.error_count()} errors")
        return None

def load_coffee_list() -> List[Coffee]:
    """
    Readable coffees only. Rows that fail validation stay on disk; see
    save_coffee_list.
    """
    with _IO_LOCK:
        raw = read_json(coffees_path(), default=[])
    out: List[Coffee] = []
    skipped = 0
    for row in _rows(raw):
        coffee = _parse(row)
        if coffee is None:
            skipped += 1
            continue
        out.append(coffee)
    if skipped:
        log.warning(f"[store] {skipped} coffee record(s) skipped while loading")
    return out

def unreadable_rows(rows: List[Any], known_ids: Iterable[Optional[str]] = ()) -> List[Dict[str, Any]]:
    """Dict rows that do not validate as a Coffee and whose id is not in known_ids."""
    ids = {i for i in known_ids if i}
    out: List[Dict[str, Any]] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        rid = row.get("id")
        if isinstance(rid, str) and rid in ids:
            continue
        try:
            Coffee.model_validate(row)
        except ValidationError:
            out.append(row)
    return out

def save_coffee_list(coffees: List[Coffee], passthrough: Optional[List[Dict[str, Any]]] = None) -> None:
    """
    Write the list. Unreadable rows are written back unchanged after the
    coffees: by default the ones already on disk, or `passthrough` when given.
    """
    with _IO_LOCK:
        if passthrough is None:
            existing = _rows(read_json(coffees_path(), default=[]))
            passthrough = unreadable_rows(existing, (c.id for c in coffees))
        if passthrough:
            log.info(f"[store] keeping {len(passthrough)} unreadable coffee record(s) as stored")
        write_json(coffees_path(), [c.to_wire() for c in coffees] + list(passthrough))

__all__ = ["COFFEES_FILE", "coffees_path", "load_coffee_list", "save_coffee_list", "unreadable_rows"]
