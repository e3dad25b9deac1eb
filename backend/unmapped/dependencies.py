from functools import lru_cache
from typing import Callable, Dict, Optional

from fastapi import HTTPException, status

from .database.gateway import PersistenceGateway, SqlGateway
from .database.session import AsyncSessionLocal
from .logger import get_logger
from .services.badges import AchievementService
from .services.clock import RoundClock
from .services.geo import GeoLookup, ReverseGeocoder
from .services.locations import LocationRepository
from .services.multiplayer import MultiplayerTurnScheduler
from .services.players import PlayerRepository
from .services.session import GameSessionController

logger = get_logger("services")


class GameServices:
    """Everything the routers need, shared for the lifetime of the app."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        geo: GeoLookup,
        locations: Optional[LocationRepository] = None,
        clock_factory: Callable[[], RoundClock] = RoundClock,
    ):
        self.gateway = gateway
        self.geo = geo
        self.locations = locations or LocationRepository()
        self.clock_factory = clock_factory
        self.players = PlayerRepository(gateway)
        self.achievements = AchievementService(gateway)
        self.sessions: Dict[str, GameSessionController] = {}
        self.multiplayer_games: Dict[str, MultiplayerTurnScheduler] = {}

    def get_session(self, session_id: str) -> GameSessionController:
        session = self.sessions.get(session_id)
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Game session not found."
            )
        return session

    def get_multiplayer_game(self, game_id: str) -> MultiplayerTurnScheduler:
        game = self.multiplayer_games.get(game_id)
        if game is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Multiplayer game not found."
            )
        return game

    def prune(self) -> int:
        """
        Forget sessions and multiplayer games that are over.

        Finished, abandoned and exhausted games stay readable until the next
        game is created.

        Returns:
            Number of controllers removed
        """
        removed = 0
        for registry in (self.sessions, self.multiplayer_games):
            for key, controller in list(registry.items()):
                state = controller.state
                if state.is_game_finished or state.is_abandoned or getattr(state, "is_exhausted", False):
                    controller.close()
                    del registry[key]
                    removed += 1
        if removed:
            logger.info("Pruned %d finished games", removed)
        return removed

    def close(self) -> None:
        """Stop every running clock."""
        for controller in list(self.sessions.values()) + list(self.multiplayer_games.values()):
            controller.close()
        self.sessions.clear()
        self.multiplayer_games.clear()


@lru_cache()
def get_services() -> GameServices:
    """Get the process-wide services."""
    return GameServices(gateway=SqlGateway(AsyncSessionLocal), geo=ReverseGeocoder())
