"""Liveness check reporting whether the background poller is alive."""

from typing import Any

from fastapi import APIRouter, Request

from planewatch.config import settings

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check(request: Request) -> dict[str, Any]:
    poller = getattr(request.app.state, "poller", None)
    last_updated = poller.last_updated if poller is not None else None
    return {
        "status": "ok",
        "env": settings.planewatch_env,
        "poller_running": bool(poller is not None and poller.is_running),
        "last_updated": last_updated.isoformat() if last_updated else None,
    }
