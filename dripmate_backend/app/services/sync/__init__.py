# dripmate_backend/app/services/sync/__init__.py
from __future__ import annotations

from .dedup import (
    create_stable_coffee_id,
    dedupe_coffees,
    has_feedback_history_coverage,
    merge_inbound,
    normalize_coffee_record,
)
from .backend_client import BackendSyncClient
from .service import client_from_settings, pull_from_backend, push_to_backend

__all__ = [
    "create_stable_coffee_id", "dedupe_coffees", "has_feedback_history_coverage",
    "merge_inbound", "normalize_coffee_record",
    "BackendSyncClient", "client_from_settings", "pull_from_backend", "push_to_backend",
]
