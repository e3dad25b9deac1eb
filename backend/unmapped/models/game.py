from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Annotated, Dict, List, Literal, Optional, Union

from .badges import BadgeUpdate
from .player import Player


class Continent(str, Enum):
    """Continent codes, in bitmask order."""
    EU = "EU"
    AS = "AS"
    AF = "AF"
    NA = "NA"
    SA = "SA"
    OC = "OC"

    @property
    def bit_index(self) -> int:
        return list(Continent).index(self)


class GameMode(str, Enum):
    SINGLE_PLAYER = "single_player"
    CHALLENGE = "challenge"
    CURATED = "curated"


class ClockState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"


class LatLng(BaseModel):
    """A point in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    @property
    def key(self) -> str:
        """Exact ``lat,lng`` string used to store played locations."""
        return f"{self.latitude},{self.longitude}"


class LocationInfo(BaseModel):
    """Best-effort country and continent of a point."""
    model_config = ConfigDict(frozen=True)

    country_code: Optional[str] = None
    continent: Optional[Continent] = None


class RoundResult(BaseModel):
    """Outcome of one guess. Never changes once created."""
    model_config = ConfigDict(frozen=True)

    distance_meters: float = Field(ge=0)
    shame_score: int = Field(ge=0)
    time_taken_seconds: int = Field(ge=0)
    actual_location: LatLng
    guess_location: LatLng
    actual_info: LocationInfo = LocationInfo()
    guess_info: LocationInfo = LocationInfo()


class Round(BaseModel):
    """Single round within a solo game session."""
    target_location: LatLng
    guess_location: Optional[LatLng] = None
    result: Optional[RoundResult] = None


class MultiplayerRound(BaseModel):
    """Round shared by every player of a multiplayer game."""
    target_location: LatLng
    results: Dict[str, RoundResult] = {}


class SessionState(BaseModel):
    """Snapshot of a single-player, challenge or curated-map session."""
    mode: GameMode
    map_id: Optional[str] = None
    is_loading: bool = True
    rounds: List[Round] = []
    current_round_index: int = 0
    is_game_finished: bool = False
    is_exhausted: bool = False
    is_abandoned: bool = False
    clock_state: ClockState = ClockState.IDLE
    remaining_ms: int = 0
    formatted_time: str = "02:00"
    show_exit_dialog: bool = False
    is_movement_allowed: bool = True
    force_guess: bool = False
    badge_update: Optional[BadgeUpdate] = None

    @property
    def current_round(self) -> Optional[Round]:
        if 0 <= self.current_round_index < len(self.rounds):
            return self.rounds[self.current_round_index]
        return None

    @computed_field
    @property
    def total_score(self) -> int:
        return sum(r.result.shame_score for r in self.rounds if r.result)


# Multiplayer phases. Each variant carries the data its screen needs.

class LoadingPhase(BaseModel):
    name: Literal["loading"] = "loading"


class GameStartPhase(BaseModel):
    name: Literal["game_start"] = "game_start"
    first_player_id: Optional[str] = None


class PlayingPhase(BaseModel):
    name: Literal["playing"] = "playing"
    player_index: int


class RoundTransitionPhase(BaseModel):
    name: Literal["round_transition"] = "round_transition"
    next_player_index: int


class RoundResultPhase(BaseModel):
    name: Literal["round_result"] = "round_result"
    results: Dict[str, RoundResult]


class GameOverPhase(BaseModel):
    name: Literal["game_over"] = "game_over"
    totals: Dict[str, int]


GamePhase = Annotated[
    Union[
        LoadingPhase,
        GameStartPhase,
        PlayingPhase,
        RoundTransitionPhase,
        RoundResultPhase,
        GameOverPhase,
    ],
    Field(discriminator="name"),
]


class MultiplayerState(BaseModel):
    """Snapshot of a local turn-based multiplayer game."""
    is_loading: bool = True
    players: List[Player] = []
    rounds: List[MultiplayerRound] = []
    current_round_index: int = 0
    current_player_index: int = 0
    phase: GamePhase = LoadingPhase()
    is_abandoned: bool = False
    clock_state: ClockState = ClockState.IDLE
    remaining_ms: int = 0
    formatted_time: str = "02:00"
    show_exit_dialog: bool = False
    is_movement_allowed: bool = True
    force_guess: bool = False

    @computed_field
    @property
    def is_game_finished(self) -> bool:
        return isinstance(self.phase, GameOverPhase)


class SessionCreate(BaseModel):
    """Request to create a new game session."""
    mode: GameMode = GameMode.SINGLE_PLAYER
    map_id: Optional[str] = None
    player_id: Optional[str] = None
    timer_duration_ms: Optional[int] = Field(default=None, ge=1000)


class SessionResponse(BaseModel):
    """Session id with its current state."""
    id: str
    state: SessionState


class MultiplayerCreate(BaseModel):
    """Request to set up a multiplayer game with existing players."""
    player_ids: List[str] = Field(min_length=1)
    timer_duration_ms: Optional[int] = Field(default=None, ge=1000)


class MultiplayerResponse(BaseModel):
    id: str
    state: MultiplayerState


class ScoreRequest(BaseModel):
    distance_meters: float = Field(ge=0)


class ScoreResponse(BaseModel):
    """Score preview for a distance."""
    distance_meters: float
    score: int
    tier: str
    roast: str
