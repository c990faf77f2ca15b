"""Model watch list API router."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from model_tracker.dependencies import get_watch_list_service
from model_tracker.schemas.portfolio import ModelWatchList
from model_tracker.services.analysis import ModelWatchListService

router = APIRouter(prefix="/api/model-watch-list", tags=["model-watch-list"])


@router.get("", response_model=ModelWatchList)
async def get_model_watch_list(
    target_date: date | None = Query(None, alias="date", description="Email date (YYYY-MM-DD)"),
    service: ModelWatchListService = Depends(get_watch_list_service),
):
    """Top models by 12-month return, flagged owned or not owned."""
    return await service.get_model_watch_list(target_date)
