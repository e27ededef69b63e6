"""Daily count and sighting history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from planewatch.models import SightingHistoryEntry, StatsResponse
from planewatch.services.poller import Poller

from .dependencies import get_poller

router = APIRouter(prefix="/api/v1", tags=["stats"])


@router.get("/stats", response_model=StatsResponse, summary="Today's aircraft count")
async def get_stats(poller: Poller = Depends(get_poller)) -> StatsResponse:
    daily = poller.stats.daily
    return StatsResponse(date=daily.date, count=daily.count)


@router.get(
    "/history",
    response_model=list[SightingHistoryEntry],
    summary="Recent sightings, newest first",
)
async def get_history(poller: Poller = Depends(get_poller)) -> list[SightingHistoryEntry]:
    return poller.stats.history


@router.delete("/history", status_code=status.HTTP_204_NO_CONTENT, summary="Clear history")
async def clear_history(poller: Poller = Depends(get_poller)) -> None:
    poller.stats.clear_history()
