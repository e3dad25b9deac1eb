import asyncio
from typing import List, Optional

from ..config import get_settings
from ..content import CuratedMap
from ..logger import get_logger
from ..models.badges import BadgeStatus, BadgeUpdate
from ..models.commands import (
    CancelExit,
    ConfirmExit,
    NextRound,
    PauseForExit,
    StartNewGame,
    SubmitGuess,
)
from ..models.game import GameMode, LatLng, Round, RoundResult, SessionState
from .badges import AchievementService
from .clock import RoundClock
from .controller import ClockedController
from .geo import GeoLookup
from .locations import LocationRepository
from .players import PlayerRepository
from .scoring import calculate_shame_score, distance_meters

logger = get_logger("session")


class GameSessionController(ClockedController[SessionState]):
    """
    Round lifecycle for one solo game.

    Commands go through :meth:`handle`, which returns the resulting state.
    Subscribers get a deep copy of the state after every change, clock
    ticks included. Commands that make no sense in the current state are
    ignored.

    Subclasses decide where target locations come from and may react to
    each round result as soon as it exists.
    """

    mode: GameMode = GameMode.SINGLE_PLAYER

    def __init__(
        self,
        locations: LocationRepository,
        geo: GeoLookup,
        achievements: AchievementService,
        players: Optional[PlayerRepository] = None,
        player_id: Optional[str] = None,
        duration_ms: Optional[int] = None,
        rounds_per_game: Optional[int] = None,
        clock: Optional[RoundClock] = None,
    ):
        settings = get_settings()
        duration_ms = duration_ms or settings.TIMER_DURATION_MS
        self.locations = locations
        self.geo = geo
        self.achievements = achievements
        self.players = players
        self.player_id = player_id
        self.rounds_per_game = rounds_per_game or settings.ROUNDS_PER_GAME
        self._submitting = False
        self.duration_ms = duration_ms
        super().__init__(self._initial_state(), duration_ms, clock)

    def _initial_state(self) -> SessionState:
        return SessionState(mode=self.mode, remaining_ms=self.duration_ms)

    # Commands

    async def _dispatch(self, command) -> None:
        if isinstance(command, StartNewGame):
            await self.start_new_game()
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

    async def load_targets(self) -> List[LatLng]:
        return self.locations.game_locations(self.rounds_per_game)

    async def start_new_game(self) -> None:
        """Load targets and start the first round."""
        self.clock.reset()
        self.state = self._initial_state()
        self._submitting = False
        self._resume_on_cancel = False
        self._publish()

        targets = await self.load_targets()
        self.state.rounds = [Round(target_location=t) for t in targets]
        self.state.current_round_index = 0
        self.state.is_loading = False

        if not self.state.rounds:
            self.state.is_exhausted = True
            logger.info("No locations left for %s game", self.mode.value)
            self._publish()
            return

        logger.info("Started %s game with %d rounds", self.mode.value, len(self.state.rounds))
        with self._quiet_clock():
            self.clock.restart(self.duration_ms)
        self._publish()

    def _can_guess(self) -> bool:
        current = self.state.current_round
        return (
            current is not None
            and current.result is None
            and not self._submitting
            and not self.state.is_loading
            and not self.state.is_game_finished
            and not self.state.is_abandoned
            and not self.state.show_exit_dialog
        )

    async def submit_guess(self, location: LatLng) -> Optional[RoundResult]:
        """
        Score a guess for the current round.

        Args:
            location: Where the player guessed the target is

        Returns:
            The new round result, or None when the guess was ignored
        """
        if not self._can_guess():
            logger.debug("Ignoring guess on round %d", self.state.current_round_index + 1)
            return None

        self._submitting = True
        current = self.state.current_round
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
            if self.state.current_round is not current or self.state.is_abandoned:
                logger.info("Dropping guess for a round that is no longer current")
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
            current.guess_location = location
            current.result = result
            self.state.force_guess = False
        finally:
            self._submitting = False

        logger.info(
            "Round %d: %.0f m off, %d shame points in %ds",
            self.state.current_round_index + 1, distance, result.shame_score, elapsed,
        )
        await self.on_round_result(result)
        self._publish()
        return result

    async def on_round_result(self, result: RoundResult) -> None:
        """Hook for per-round side effects."""

    async def next_round(self) -> None:
        """Advance to the next round, or finish the game after the last one."""
        current = self.state.current_round
        if (
            current is None
            or current.result is None
            or self.state.is_game_finished
            or self.state.is_abandoned
        ):
            logger.debug("Ignoring next round in current state")
            return

        if self.state.current_round_index < len(self.state.rounds) - 1:
            self.state.current_round_index += 1
            self.state.is_movement_allowed = True
            self.state.force_guess = False
            with self._quiet_clock():
                self.clock.restart(self.duration_ms)
            self._publish()
            return

        self.state.is_game_finished = True
        self._publish()
        await self.finish_game()
        self._publish()

    async def finish_game(self) -> None:
        """Process the finished game's rounds as one achievement batch."""
        results = [r.result for r in self.state.rounds if r.result is not None]
        update = await self.achievements.process_game_results(results)
        self.state.badge_update = self._merge_update(update)

        if self.players is not None:
            player_id = self.player_id
            if player_id is None:
                main = await self.players.main_player()
                player_id = main.id if main else None
            if player_id is not None:
                await self.players.add_score(player_id, self.state.total_score)

        logger.info("Finished %s game with %d shame points", self.mode.value, self.state.total_score)

    def _merge_update(self, update: BadgeUpdate) -> BadgeUpdate:
        return update


class SinglePlayerSession(GameSessionController):
    mode = GameMode.SINGLE_PLAYER


class ChallengeSession(GameSessionController):
    """Solo game on the harder challenge location pool."""
    mode = GameMode.CHALLENGE

    async def load_targets(self) -> List[LatLng]:
        return self.locations.challenge_locations(self.rounds_per_game)


class CuratedMapSession(GameSessionController):
    """
    Run through every not yet mastered location of a curated map.

    Each guess goes to the mastery tracker straight away, so leaving the
    game halfway keeps the locations already mastered.
    """
    mode = GameMode.CURATED

    def __init__(self, curated_map: CuratedMap, *args, **kwargs):
        self.curated_map = curated_map
        self._mastery_unlocked: List[BadgeStatus] = []
        super().__init__(*args, **kwargs)

    def _initial_state(self) -> SessionState:
        state = super()._initial_state()
        state.map_id = self.curated_map.id
        return state

    async def load_targets(self) -> List[LatLng]:
        self._mastery_unlocked = []
        mastered = await self.achievements.mastered_locations(self.curated_map.id)
        return self.locations.unmastered(self.curated_map.locations, mastered)

    async def on_round_result(self, result: RoundResult) -> None:
        update = await self.achievements.process_curated_result(result, self.curated_map)
        self._mastery_unlocked.extend(update.unlocked)

    def _merge_update(self, update: BadgeUpdate) -> BadgeUpdate:
        return BadgeUpdate(
            unlocked=self._mastery_unlocked + update.unlocked,
            progressed=update.progressed,
        )
