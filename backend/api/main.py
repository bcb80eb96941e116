from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import os
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager

from backend.api.counter_store import CounterStore, StorageError
from backend.api import counters as _counters_module
from backend.api import metrics as _metrics_module

# Configure logging
logger = logging.getLogger(__name__)

SERVICE_NAME = "counter-backend"
SERVICE_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler: open the counter store and expose it on app.state.

    The database location is read from COUNTERS_DB_PATH at startup, so tests
    can point each TestClient session at a temporary file.
    """
    store = CounterStore()
    store.initialize()
    app.state.store = store
    logger.info(f"Counter backend started (db={store.path})")
    try:
        yield
    finally:
        logger.info("Shutting down counter backend...")
        app.state.store = None


app = FastAPI(title="Counter Backend", lifespan=lifespan)

# Allow local static servers or dev frontends to call the API during dev/testing.
if os.environ.get("ENV", "development") in ("development", "test"):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:8080",
            "http://127.0.0.1:8080",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )


@app.get("/api/health")
def health(request: Request):
    """Health endpoint used by smoke tests and the client's connectivity check."""
    store = getattr(request.app.state, "store", None)
    status, counters = "ok", None
    if store is not None:
        try:
            counters = store.count()
        except StorageError as e:
            logger.warning(f"Health check could not read the counter store: {e}")
            status = "degraded"
    return {
        "status": status,
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "counters": counters,
    }


app.include_router(_counters_module.router)
app.include_router(_metrics_module.router)
