"""Health check endpoint."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from .. import db
from ..helpers import get_offers, get_pharmacies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/health")
async def health(request: Request):
    """Health check: mode, dataset size, version, DB latency."""
    mode = "database" if db.is_available() else "json_fallback"
    pharmacy_count = len(get_pharmacies())
    offer_count = len(get_offers())
    db_ok = False
    db_latency_ms: float | None = None

    if db.is_available():
        try:
            t0 = time.monotonic()
            with db.get_conn() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT count(*) FROM pharmacies")
                    pharmacy_count = cur.fetchone()[0]
                    cur.execute("SELECT count(*) FROM drugs")
                    offer_count = cur.fetchone()[0]
            db_latency_ms = round((time.monotonic() - t0) * 1000, 1)
            db_ok = True
        except Exception:
            logger.warning("Health check DB query failed", exc_info=True)
            mode = "json_fallback"

    server_started_at = request.app.state.server_started_at
    uptime_seconds = round((datetime.now(timezone.utc) - server_started_at).total_seconds())

    overall_status = "healthy" if db_ok else "degraded"

    return JSONResponse(
        status_code=200,
        content={
            "status": overall_status,
            "mode": mode,
            "pharmacy_count": pharmacy_count,
            "offer_count": offer_count,
            "version": request.app.version,
            "database_connected": db_ok,
            "started_at": server_started_at.isoformat(),
            "uptime_seconds": uptime_seconds,
            "checks": {
                "database": {
                    "status": "up" if db_ok else "down",
                    "latency_ms": db_latency_ms,
                },
            },
        },
    )
