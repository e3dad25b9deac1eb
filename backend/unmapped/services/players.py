import asyncio
from typing import Dict, List, Optional

from pydantic import TypeAdapter

from ..database.gateway import PersistenceGateway, read_json, write_json
from ..logger import get_logger
from ..models.player import Player

logger = get_logger("players")

PLAYERS_KEY = "players"

_players_adapter = TypeAdapter(List[Player])


class PlayerRepository:
    """
    Local players and their total shame scores.

    The whole list is stored as one blob. The first registered player is
    the device owner ("main player") whose solo games count towards their
    total.
    """

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway
        self._lock = asyncio.Lock()

    async def list_players(self) -> List[Player]:
        return await read_json(self.gateway, PLAYERS_KEY, _players_adapter, list)

    async def _save(self, players: List[Player]) -> None:
        await write_json(self.gateway, PLAYERS_KEY, _players_adapter, players)

    async def get_player(self, player_id: str) -> Optional[Player]:
        for player in await self.list_players():
            if player.id == player_id:
                return player
        return None

    async def main_player(self) -> Optional[Player]:
        players = await self.list_players()
        return players[0] if players else None

    async def create_player(self, name: str) -> Player:
        player = Player(name=name.strip())
        async with self._lock:
            players = await self.list_players()
            players.append(player)
            await self._save(players)
        logger.info("Created player %s (%s)", player.name, player.id)
        return player

    async def delete_player(self, player_id: str) -> bool:
        async with self._lock:
            players = await self.list_players()
            remaining = [p for p in players if p.id != player_id]
            if len(remaining) == len(players):
                return False
            await self._save(remaining)
        return True

    async def add_scores(self, scores: Dict[str, int]) -> List[Player]:
        """
        Add points to several players in one write.

        Unknown player ids are ignored.

        Returns:
            The players that were updated
        """
        async with self._lock:
            players = await self.list_players()
            updated = []
            for player in players:
                if player.id in scores:
                    player.total_shame_score += scores[player.id]
                    updated.append(player)
            if updated:
                await self._save(players)
        return updated

    async def add_score(self, player_id: str, points: int) -> Optional[Player]:
        updated = await self.add_scores({player_id: points})
        return updated[0] if updated else None

    async def rankings(self) -> List[Player]:
        """Players sorted by total shame score, highest first."""
        players = await self.list_players()
        return sorted(players, key=lambda p: p.total_shame_score, reverse=True)

    async def reset(self) -> None:
        async with self._lock:
            await self.gateway.delete(PLAYERS_KEY)
