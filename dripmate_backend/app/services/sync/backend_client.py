# dripmate_backend/app/services/sync/backend_client.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from dripmate_backend.app.config.manifest import BACKEND_URL, SYNC_TIMEOUT_S
from .dedup import log

# Purpose:
# Thin client for the remote Dripmate backend. Every call degrades to
# None/False on missing token, transport error, non-2xx or success:false;
# sync must never break local use.


class BackendSyncClient:
    def __init__(
        self,
        token: Optional[str],
        device_id: Optional[str],
        base_url: str = BACKEND_URL,
        timeout: float = SYNC_TIMEOUT_S,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.token = token
        self.device_id = device_id
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BackendSyncClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------------- plumbing ----------------

    def _headers(self) -> Dict[str, str]:
        h = {"Authorization": f"Bearer {self.token}"}
        if self.device_id:
            h["X-Device-ID"] = self.device_id
        return h

    def _call(self, method: str, path: str, json: Any = None) -> Optional[Dict[str, Any]]:
        """Response body when the call succeeded, else None (logged)."""
        if not self.token:
            log.info(f"[sync] no token, skipping {method} {path}")
            return None
        try:
            resp = self._client.request(method, path, headers=self._headers(), json=json)
        except httpx.HTTPError as e:
            log.warning(f"[sync] {method} {path} failed: {e}")
            return None
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if resp.is_error:
            reason = data.get("error") or data.get("message") or resp.reason_phrase
            log.warning(f"[sync] {method} {path} rejected ({resp.status_code}): {reason}")
            return None
        return data

    # ---------------- auth ----------------

    def check_user_status(self) -> Dict[str, Any]:
        if not self.token:
            return {"valid": False, "error": "No token found"}
        data = self._call("GET", "/api/auth/validate")
        if data is None:
            return {"valid": False, "error": "Validation failed"}
        if data.get("valid"):
            return {"valid": True, "user": data.get("user")}
        return {"valid": False, "error": data.get("error") or "Validation failed"}

    # ---------------- coffees ----------------

    def fetch_coffees(self) -> Optional[List[Dict[str, Any]]]:
        data = self._call("GET", "/api/coffees")
        if not data or not data.get("success"):
            return None
        remote = data.get("coffees")
        remote = remote if isinstance(remote, list) else []
        log.info(f"[sync] {len(remote)} coffees loaded from backend")
        # raw rows, deduped by merge_inbound
        return [c for c in remote if isinstance(c, dict)]

    def push_coffees(self, coffees: List[Dict[str, Any]]) -> bool:
        data = self._call("POST", "/api/coffees", json={"coffees": coffees})
        if not data or not data.get("success"):
            return False
        log.info(f"[sync] {data.get('saved', len(coffees))} coffees synced to backend")
        return True

    # ---------------- preferences ----------------

    def fetch_grinder(self) -> Optional[str]:
        data = self._call("GET", "/api/user/grinder")
        if not data or not data.get("success"):
            return None
        return data.get("grinder") or None

    def push_grinder(self, grinder: str) -> bool:
        data = self._call("POST", "/api/user/grinder", json={"grinder": grinder})
        return bool(data and data.get("success"))

    def fetch_water_hardness(self) -> Optional[float]:
        data = self._call("GET", "/api/user/water-hardness")
        if not data or not data.get("success") or data.get("waterHardness") is None:
            return None
        try:
            return float(data["waterHardness"])
        except (TypeError, ValueError):
            return None

    def push_water_hardness(self, value: float) -> bool:
        data = self._call("POST", "/api/user/water-hardness", json={"waterHardness": value})
        return bool(data and data.get("success"))


__all__ = ["BackendSyncClient"]
