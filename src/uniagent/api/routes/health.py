"""Health check endpoints."""

import time

from fastapi import APIRouter, Depends

from uniagent import __version__
from uniagent.api.dependencies import get_app_settings, get_broker
from uniagent.broker.service import Broker
from uniagent.config import Settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "service": "uniagent", "timestamp": int(time.time() * 1000)}


@router.get("/health/detailed")
async def detailed_health(
    broker: Broker = Depends(get_broker),
    settings: Settings = Depends(get_app_settings),
):
    """Detailed health check with configuration info."""
    engine_ok = await broker.engine.health_check()
    return {
        "status": "ok" if engine_ok else "degraded",
        "service": "uniagent",
        "version": __version__,
        "timestamp": int(time.time() * 1000),
        "engine": {"name": broker.engine.name, "healthy": engine_ok},
        "pending_transactions": broker.pending_count,
        "config": settings.get_safe_dict(),
    }
