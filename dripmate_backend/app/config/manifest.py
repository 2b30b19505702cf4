# dripmate_backend/app/config/manifest.py
from __future__ import annotations

import os

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default

# Grams of coffee used when a bag has no customAmount
DEFAULT_DOSE_G = _env_float("DRIPMATE_DEFAULT_DOSE_G", 15.0)

# feedbackHistory entries kept per coffee (oldest dropped first)
HISTORY_CAP = 30

# Remote sync backend
BACKEND_URL = os.getenv("DRIPMATE_BACKEND_URL", "https://dripmate-backend-production.up.railway.app")
SYNC_TIMEOUT_S = _env_float("DRIPMATE_SYNC_TIMEOUT", 10.0)

__all__ = ["DEFAULT_DOSE_G", "HISTORY_CAP", "BACKEND_URL", "SYNC_TIMEOUT_S"]
