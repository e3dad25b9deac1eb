from pydantic import BaseModel, Field
from typing import Annotated, Literal, Union

from .game import LatLng


class StartNewGame(BaseModel):
    type: Literal["start_new_game"] = "start_new_game"


class SubmitGuess(BaseModel):
    type: Literal["submit_guess"] = "submit_guess"
    location: LatLng


class NextRound(BaseModel):
    type: Literal["next_round"] = "next_round"


class BeginTurn(BaseModel):
    """Multiplayer only: the announced player starts playing."""
    type: Literal["begin_turn"] = "begin_turn"


class PauseForExit(BaseModel):
    type: Literal["pause_for_exit"] = "pause_for_exit"


class ConfirmExit(BaseModel):
    type: Literal["confirm_exit"] = "confirm_exit"


class CancelExit(BaseModel):
    type: Literal["cancel_exit"] = "cancel_exit"


SessionCommand = Annotated[
    Union[StartNewGame, SubmitGuess, NextRound, PauseForExit, ConfirmExit, CancelExit],
    Field(discriminator="type"),
]

MultiplayerCommand = Annotated[
    Union[StartNewGame, BeginTurn, SubmitGuess, NextRound, PauseForExit, ConfirmExit, CancelExit],
    Field(discriminator="type"),
]
