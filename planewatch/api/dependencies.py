"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from planewatch.services.poller import Poller


def get_poller(request: Request) -> Poller:
    """Return the poller created by the application lifespan."""

    poller: Poller | None = getattr(request.app.state, "poller", None)
    if poller is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Poller is not initialized",
        )
    return poller
