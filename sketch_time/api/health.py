"""
Health and diagnostics API.

Provides lightweight endpoints for operational monitoring without exposing secrets.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sketch_time.api.dependencies import Services, get_services
from sketch_time.core.logging import LOGGER_NAME
from sketch_time.features.uploads.store import InMemoryUploadStore

logger = logging.getLogger(LOGGER_NAME)

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@router.get("/readyz")
def readyz(services: Services = Depends(get_services)):
    """Readiness check: store reachable, plus live timer count."""
    store_kind = "memory" if isinstance(services.store, InMemoryUploadStore) else "sql"
    payload = {
        "store": store_kind,
        "active_timers": services.timers.active_count(),
        "computed_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        # Cheap read against the store
        services.store.count_uploads(0)
    except Exception as exc:
        logger.warning("readyz.store_unavailable", extra={"error_code": "storage_failure"})
        payload.update({"status": "error", "reason": type(exc).__name__})
        return JSONResponse(status_code=503, content=payload)
    payload["status"] = "ok"
    return payload
