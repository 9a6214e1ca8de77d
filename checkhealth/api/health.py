"""
Health and readiness endpoints.

Lightweight operational probes that never expose secrets.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect

from checkhealth.core.database import get_engine
from checkhealth.features.goals.store import SqlGoalStore, get_store

logger = logging.getLogger("checkhealth")

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz():
    """Readiness check: goal store reachable (and goals table present when SQL-backed)."""
    store = get_store()
    if not isinstance(store, SqlGoalStore):
        return {"status": "ok", "store": "memory"}

    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")

        if not inspect(engine).has_table("goals"):
            logger.warning("[readyz] missing tables: goals")
            return JSONResponse(status_code=503, content={"status": "error", "detail": "missing tables: goals"})

        return {"status": "ok", "store": "sql"}
    except Exception as e:
        logger.error(f"[readyz] readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "database unreachable"})
