"""Display and authentication settings endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from planewatch.models import DisplaySettingsUpdate, DisplaySettingsView
from planewatch.services.poller import Poller

from .dependencies import get_poller

router = APIRouter(prefix="/api/v1", tags=["settings"])

logger = logging.getLogger("planewatch.api.settings")


@router.get("/settings", response_model=DisplaySettingsView, summary="Current settings")
async def get_settings(poller: Poller = Depends(get_poller)) -> DisplaySettingsView:
    """Return settings with the password and client secret masked."""

    return DisplaySettingsView.from_settings(poller.display_settings)


@router.put("/settings", response_model=DisplaySettingsView, summary="Update settings")
async def update_settings(
    update: DisplaySettingsUpdate, poller: Poller = Depends(get_poller)
) -> DisplaySettingsView:
    """Apply a partial update; changing the auth mode restarts the poll timers."""

    new_settings = update.apply(poller.display_settings)
    poller.update_settings(new_settings)
    logger.info(
        "Settings updated: basic_auth=%s bearer_token=%s",
        new_settings.use_basic_auth,
        new_settings.use_bearer_token,
    )
    return DisplaySettingsView.from_settings(new_settings)
