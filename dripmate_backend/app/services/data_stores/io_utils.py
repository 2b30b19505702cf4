# dripmate_backend/app/services/data_stores/io_utils.py
from __future__ import annotations

import json, os, tempfile, shutil
from pathlib import Path
from typing import Any

from dripmate_backend.app.config.paths import RULES_DIR

def _assert_writable(path: Path) -> None:
    p = path.resolve()
    if p == RULES_DIR or RULES_DIR in p.parents:
        raise PermissionError(f"refusing to write under rules dir: {p}")

def atomic_write(path: Path, text: str) -> None:
    """
    Atomic text write: temp file in the target dir, then os.replace.
    Rule catalogs are read-only and refused.
    """
    _assert_writable(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding="utf-8") as tf:
        tf.write(text)
        tmp = Path(tf.name)
    try:
        os.replace(tmp, path)
    except OSError:
        shutil.move(str(tmp), str(path))

def write_json(path: Path, obj: Any) -> None:
    atomic_write(path, json.dumps(obj, ensure_ascii=False, indent=2))

def read_json(path: Path, default: Any):
    """
    Safe JSON reader. Returns `default` if missing, empty or invalid.
    """
    if not path.exists():
        return default
    try:
        raw = path.read_text(encoding="utf-8")
        return json.loads(raw) if raw.strip() else default
    except (OSError, ValueError):
        return default
