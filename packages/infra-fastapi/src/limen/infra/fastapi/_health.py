"""Aggregated health check endpoint.

Reports per-subsystem health for the record store database and overall
application readiness. CloudFront and Route 53 are not probed: a control
plane outage degrades provisioning but not the API itself.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from limen.infra.persistence.database import get_database_manager

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


async def _check_database() -> dict[str, str]:
    """Check database connectivity via SELECT 1."""
    try:
        engine = get_database_manager().get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as exc:
        logger.warning("health_check_database_unhealthy", extra={"error": str(exc)})
        return {"status": "error", "detail": str(exc)}


@router.get("/healthz")
async def healthz() -> Any:
    """Aggregated health check.

    Returns HTTP 200 when all subsystems are healthy, HTTP 503 otherwise.
    """
    checks: dict[str, dict[str, str]] = {"database": await _check_database()}

    all_ok = all(c["status"] == "ok" for c in checks.values())
    return JSONResponse(
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
        status_code=200 if all_ok else 503,
    )
