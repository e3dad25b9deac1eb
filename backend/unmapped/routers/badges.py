from typing import List

from fastapi import APIRouter, Depends, status

from ..dependencies import GameServices, get_services
from ..models.badges import BadgeStatus, CuratedMapStatus
from ..models.player import GameStats
from ..services.badges import reset_all_data

router = APIRouter(tags=["Progress"])


@router.get("/badges", response_model=List[BadgeStatus])
async def list_badges(services: GameServices = Depends(get_services)):
    """All badges with their current progress."""
    return await services.achievements.badge_statuses()


@router.get("/maps", response_model=List[CuratedMapStatus])
async def list_maps(services: GameServices = Depends(get_services)):
    """Curated maps and how many of their locations are mastered."""
    return await services.achievements.map_statuses()


@router.get("/stats", response_model=GameStats)
async def get_stats(services: GameServices = Depends(get_services)):
    """Aggregated statistics over every finished game."""
    return await services.achievements.stats.get_stats()


@router.delete("/data", status_code=status.HTTP_204_NO_CONTENT)
async def reset_data(services: GameServices = Depends(get_services)):
    """Delete all players, badge progress, mastered locations and stats."""
    await reset_all_data(services.achievements, services.players)
    return None
