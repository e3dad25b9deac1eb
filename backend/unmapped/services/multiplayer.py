import asyncio
from typing import Dict, List, Optional

from ..config import get_settings
from ..logger import get_logger
from ..models.commands import (
    BeginTurn,
    CancelExit,
    ConfirmExit,
    NextRound,
    PauseForExit,
    StartNewGame,
    SubmitGuess,
)
from ..models.game import (
    GameOverPhase,
    GameStartPhase,
    LatLng,
    MultiplayerRound,
    MultiplayerState,
    PlayingPhase,
    RoundResult,
    RoundResultPhase,
    RoundTransitionPhase,
)
from ..models.player import Player
from .clock import RoundClock
from .controller import ClockedController
from .geo import GeoLookup
from .locations import LocationRepository
from .players import PlayerRepository
from .scoring import calculate_shame_score, distance_meters

logger = get_logger("multiplayer")


class MultiplayerTurnScheduler(ClockedController[MultiplayerState]):
    """
    Local pass-and-play game: every player guesses the same target in turn.

    Phases run LOADING -> GAME_START -> PLAYING -> ROUND_TRANSITION ->
    PLAYING ... -> ROUND_RESULT -> ROUND_TRANSITION ... -> GAME_OVER.
    The clock only runs while a player is PLAYING; every turn starts with
    an explicit ``begin_turn`` so the device can be handed over. Players
    take turns in list order in every round.

    Totals are committed to the player repository when the game is over.
    Abandoned games commit nothing.
    """

    def __init__(
        self,
        players: List[Player],
        locations: LocationRepository,
        geo: GeoLookup,
        player_repository: Optional[PlayerRepository] = None,
        duration_ms: Optional[int] = None,
        total_rounds: Optional[int] = None,
        clock: Optional[RoundClock] = None,
    ):
        settings = get_settings()
        duration_ms = duration_ms or settings.TIMER_DURATION_MS
        self.locations = locations
        self.geo = geo
        self.player_repository = player_repository
        self.total_rounds = total_rounds or settings.MULTIPLAYER_ROUNDS
        self._submitting = False
        state = MultiplayerState(players=list(players), remaining_ms=duration_ms)
        super().__init__(state, duration_ms, clock)

    async def _dispatch(self, command) -> None:
        if isinstance(command, StartNewGame):
            await self.start_new_game()
        elif isinstance(command, BeginTurn):
            self.begin_turn()
        elif isinstance(command, SubmitGuess):
            await self.submit_guess(command.location)
        elif isinstance(command, NextRound):
            await self.next_round()
        elif isinstance(command, PauseForExit):
            self.pause_for_exit()
        elif isinstance(command, ConfirmExit):
            self.confirm_exit()
        elif isinstance(command, CancelExit):
            self.cancel_exit()
        else:
            logger.debug("Ignoring unsupported command %r", command)

    @property
    def current_round(self) -> Optional[MultiplayerRound]:
        index = self.state.current_round_index
        if 0 <= index < len(self.state.rounds):
            return self.state.rounds[index]
        return None

    async def start_new_game(self) -> None:
        self.clock.reset()
        self._submitting = False
        self._resume_on_cancel = False
        self.state = MultiplayerState(players=self.state.players, remaining_ms=self.duration_ms)
        self._publish()

        targets = self.locations.game_locations(self.total_rounds)
        self.state.rounds = [MultiplayerRound(target_location=t) for t in targets]
        self.state.is_loading = False
        if not self.state.rounds or not self.state.players:
            logger.warning("Cannot start multiplayer game: %d rounds, %d players",
                           len(self.state.rounds), len(self.state.players))
            self._publish()
            return

        self.state.phase = GameStartPhase(first_player_id=self.state.players[0].id)
        logger.info("Multiplayer game ready: %d players, %d rounds",
                    len(self.state.players), len(self.state.rounds))
        self._publish()

    def begin_turn(self) -> None:
        """Start the clock for the announced player."""
        phase = self.state.phase
        if self.state.is_abandoned or self.state.show_exit_dialog:
            return
        if isinstance(phase, GameStartPhase):
            player_index = 0
        elif isinstance(phase, RoundTransitionPhase):
            player_index = phase.next_player_index
        else:
            logger.debug("Ignoring begin turn in phase %s", phase.name)
            return

        self.state.current_player_index = player_index
        self.state.phase = PlayingPhase(player_index=player_index)
        self.state.is_movement_allowed = True
        self.state.force_guess = False
        with self._quiet_clock():
            self.clock.restart(self.duration_ms)
        self._publish()

    def _can_guess(self) -> bool:
        return (
            isinstance(self.state.phase, PlayingPhase)
            and self.current_round is not None
            and not self._submitting
            and not self.state.is_abandoned
            and not self.state.show_exit_dialog
        )

    async def submit_guess(self, location: LatLng) -> Optional[RoundResult]:
        """Score the current player's guess and hand over to the next turn."""
        if not self._can_guess():
            logger.debug("Ignoring guess in phase %s", self.state.phase.name)
            return None

        current = self.current_round
        turn = self.state.phase
        player = self.state.players[turn.player_index]
        if player.id in current.results:
            return None

        self._submitting = True
        try:
            with self._quiet_clock():
                self.clock.pause()
            elapsed = self.clock.elapsed_seconds
            actual = current.target_location
            distance = distance_meters(actual, location)
            actual_info, guess_info = await asyncio.gather(
                self.geo.resolve(actual.latitude, actual.longitude),
                self.geo.resolve(location.latitude, location.longitude),
            )
            if self.current_round is not current or self.state.phase is not turn or self.state.is_abandoned:
                logger.info("Dropping guess from %s, the turn is over", player.name)
                return None
            result = RoundResult(
                distance_meters=distance,
                shame_score=calculate_shame_score(distance),
                time_taken_seconds=elapsed,
                actual_location=actual,
                guess_location=location,
                actual_info=actual_info,
                guess_info=guess_info,
            )
            current.results[player.id] = result
            self.state.force_guess = False
            self.clock.cancel()
        finally:
            self._submitting = False

        next_index = turn.player_index + 1
        if next_index < len(self.state.players):
            self.state.current_player_index = next_index
            self.state.phase = RoundTransitionPhase(next_player_index=next_index)
        else:
            self.state.phase = RoundResultPhase(results=dict(current.results))
        logger.info("%s guessed %.0f m off (%d points)", player.name, distance, result.shame_score)
        self._publish()
        return result

    def totals(self) -> Dict[str, int]:
        """Shame points per player summed over all rounds."""
        totals = {p.id: 0 for p in self.state.players}
        for round_ in self.state.rounds:
            for player_id, result in round_.results.items():
                totals[player_id] = totals.get(player_id, 0) + result.shame_score
        return totals

    async def next_round(self) -> None:
        """Leave the round result screen."""
        if self.state.is_abandoned or not isinstance(self.state.phase, RoundResultPhase):
            logger.debug("Ignoring next round in phase %s", self.state.phase.name)
            return

        if self.state.current_round_index < len(self.state.rounds) - 1:
            self.state.current_round_index += 1
            self.state.current_player_index = -1
            self.state.phase = RoundTransitionPhase(next_player_index=0)
            self._publish()
            return

        totals = self.totals()
        self.state.phase = GameOverPhase(totals=totals)
        self._publish()

        if self.player_repository is not None:
            updated = {p.id: p for p in await self.player_repository.add_scores(totals)}
            self.state.players = [updated.get(p.id, p) for p in self.state.players]
        logger.info("Multiplayer game over: %s", totals)
        self._publish()
