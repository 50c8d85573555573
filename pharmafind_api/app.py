#!/usr/bin/env python3
"""
PharmaFind: Drug Availability API

Dual-mode FastAPI server:
  • Database mode: candidate rows come from PostgreSQL when available
  • JSON fallback: candidate rows come from the dataset under data/

Usage:
    uvicorn pharmafind_api.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import db
from .helpers import load_dataset, load_policy
from .routes import delivery, health, pharmacies, search

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PharmaFind",
    version="0.1.0",
    description="Drug availability search across nearby pharmacies",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(search.router)
app.include_router(pharmacies.router)
app.include_router(delivery.router)

app.state.server_started_at = datetime.now(timezone.utc)


@app.on_event("startup")
async def startup():
    app.state.server_started_at = datetime.now(timezone.utc)
    load_policy()
    # Always load JSON (fallback data)
    load_dataset()
    # Try to connect to DB (best-effort)
    if db.init_pool():
        logger.info("Running in DATABASE mode")
    else:
        logger.info("Running in JSON FALLBACK mode")


@app.on_event("shutdown")
async def shutdown():
    db.close_pool()
