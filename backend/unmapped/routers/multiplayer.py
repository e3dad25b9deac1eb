from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import GameServices, get_services
from ..logger import get_logger
from ..models.commands import MultiplayerCommand
from ..models.game import MultiplayerCreate, MultiplayerResponse, MultiplayerState
from ..services.multiplayer import MultiplayerTurnScheduler

router = APIRouter(prefix="/multiplayer", tags=["Multiplayer"])
logger = get_logger("api")


@router.post("", response_model=MultiplayerResponse, status_code=status.HTTP_201_CREATED)
async def create_game(
    data: MultiplayerCreate,
    services: GameServices = Depends(get_services)
):
    """Set up a pass-and-play game for existing players, in the given order."""
    if len(set(data.player_ids)) != len(data.player_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A player can only join once."
        )

    players = []
    for player_id in data.player_ids:
        player = await services.players.get_player(player_id)
        if player is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Player {player_id} not found."
            )
        players.append(player)

    services.prune()
    game = MultiplayerTurnScheduler(
        players,
        locations=services.locations,
        geo=services.geo,
        player_repository=services.players,
        duration_ms=data.timer_duration_ms,
        clock=services.clock_factory(),
    )
    game_id = str(uuid4())
    services.multiplayer_games[game_id] = game
    await game.start_new_game()
    logger.info("Created multiplayer game %s with %d players", game_id, len(players))
    return MultiplayerResponse(id=game_id, state=game.snapshot())


@router.get("/{game_id}", response_model=MultiplayerResponse)
async def get_game(
    game_id: str,
    services: GameServices = Depends(get_services)
):
    """Get the current state of a multiplayer game."""
    game = services.get_multiplayer_game(game_id)
    return MultiplayerResponse(id=game_id, state=game.snapshot())


@router.post("/{game_id}/commands", response_model=MultiplayerState)
async def send_command(
    game_id: str,
    command: MultiplayerCommand,
    services: GameServices = Depends(get_services)
):
    """Apply a command (begin turn, guess, next round, exit flow) to a game."""
    game = services.get_multiplayer_game(game_id)
    return await game.handle(command)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(
    game_id: str,
    services: GameServices = Depends(get_services)
):
    """Stop and forget a multiplayer game."""
    game = services.get_multiplayer_game(game_id)
    game.close()
    del services.multiplayer_games[game_id]
    return None
