from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Optional, List
from uuid import uuid4


def _new_player_id() -> str:
    return str(uuid4())


class PlayerBase(BaseModel):
    """Base player schema."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=50)


class PlayerCreate(PlayerBase):
    """Schema for player creation."""
    pass


class Player(PlayerBase):
    """A local player and the shame points collected over all games."""
    id: str = Field(default_factory=_new_player_id)
    total_shame_score: int = 0


class RankingsResponse(BaseModel):
    """Players sorted by total shame score, worst first."""
    players: List[Player]


class GameStats(BaseModel):
    """Aggregated statistics over every processed round."""
    total_rounds: int = 0
    total_distance_km: float = 0.0
    best_distance_km: Optional[float] = None
    worst_distance_km: Optional[float] = None
    fast_guesses: int = 0
    slow_guesses: int = 0

    @computed_field
    @property
    def avg_distance_km(self) -> float:
        if self.total_rounds > 0:
            return self.total_distance_km / self.total_rounds
        return 0.0
