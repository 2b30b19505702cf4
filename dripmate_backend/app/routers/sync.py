# dripmate_backend/app/routers/sync.py
from __future__ import annotations
from fastapi import APIRouter, Depends
from typing import Any, Dict, Iterator

from dripmate_backend.app.services.sync import BackendSyncClient, client_from_settings, pull_from_backend, push_to_backend

router = APIRouter(prefix="/sync", tags=["sync"])

def get_sync_client() -> Iterator[BackendSyncClient]:
    client = client_from_settings()
    try:
        yield client
    finally:
        client.close()

# What it does:
# Pull grinder, water hardness and coffees from the remote backend. Never fails the request.
@router.post("/pull")
def pull(client: BackendSyncClient = Depends(get_sync_client)) -> Dict[str, Any]:
    return pull_from_backend(client)

@router.post("/push")
def push(client: BackendSyncClient = Depends(get_sync_client)) -> Dict[str, Any]:
    return push_to_backend(client)
