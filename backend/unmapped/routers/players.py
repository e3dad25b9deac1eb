from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import GameServices, get_services
from ..models.player import Player, PlayerCreate, RankingsResponse

router = APIRouter(prefix="/players", tags=["Players"])


@router.get("", response_model=List[Player])
async def list_players(services: GameServices = Depends(get_services)):
    """List all local players. The first one is the main player."""
    return await services.players.list_players()


@router.post("", response_model=Player, status_code=status.HTTP_201_CREATED)
async def create_player(
    data: PlayerCreate,
    services: GameServices = Depends(get_services)
):
    """Register a new player."""
    return await services.players.create_player(data.name)


@router.get("/rankings", response_model=RankingsResponse)
async def get_rankings(services: GameServices = Depends(get_services)):
    """Players sorted by total shame score, most shameful first."""
    return RankingsResponse(players=await services.players.rankings())


@router.get("/{player_id}", response_model=Player)
async def get_player(
    player_id: str,
    services: GameServices = Depends(get_services)
):
    """Get a single player."""
    player = await services.players.get_player(player_id)
    if player is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Player not found."
        )
    return player


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(
    player_id: str,
    services: GameServices = Depends(get_services)
):
    """Remove a player."""
    if not await services.players.delete_player(player_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Player not found."
        )
    return None
