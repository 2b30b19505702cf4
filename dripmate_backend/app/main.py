# main.py: backend entrypoint
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dripmate_backend.app.config.paths import ensure_data_dir_exists
from dripmate_backend.app.services.data_stores import load_coffee_list, load_environment, save_coffee_list
from dripmate_backend.app.services.feedback.adjustments import migrate_initial_values
from dripmate_backend.app.routers import brew, coffees, feedback, settings, sync

log = logging.getLogger("dripmate.app")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

app = FastAPI(title="Dripmate API")

# --- CORS for the PWA dev server --------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include routers under /api ----------------------------------------------
for _module in (coffees, brew, feedback, settings, sync):
    app.include_router(_module.router, prefix="/api")

@app.on_event("startup")
def _startup() -> None:
    data_dir = ensure_data_dir_exists()
    log.info(f"[app] data dir {data_dir}")
    # older records may predate the baseline anchors
    stored = load_coffee_list()
    if migrate_initial_values(stored, load_environment()):
        save_coffee_list(stored)
        log.info(f"[app] baseline anchors filled for {len(stored)} coffees")

# --- Health ------------------------------------------------------------------
@app.get("/health")
def health():
    return {"ok": True}

@app.get("/api/health")
def api_health():
    # mirror the non-prefixed /health so the client's /api/health succeeds
    return {"ok": True}

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dripmate_backend.app.main:app", host="127.0.0.1", port=8000)
