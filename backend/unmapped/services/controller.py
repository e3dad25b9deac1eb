import asyncio
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, List, Optional, TypeVar, Union

from ..logger import get_logger
from ..models.game import MultiplayerState, SessionState
from .clock import RoundClock

logger = get_logger("controller")

S = TypeVar("S", SessionState, MultiplayerState)
StateListener = Callable[[Union[SessionState, MultiplayerState]], None]


class ClockedController(Generic[S]):
    """
    Shared plumbing for controllers that own a :class:`RoundClock`.

    Holds the state object, mirrors the clock into it, publishes deep
    copies to subscribers and implements the exit confirmation flow.
    """

    def __init__(self, state: S, duration_ms: int, clock: Optional[RoundClock] = None):
        self.state = state
        self.duration_ms = duration_ms
        self.clock = clock or RoundClock()
        self.clock.on_tick = self._on_clock_tick
        self.clock.on_expire = self._on_clock_expired
        self._listeners: List[StateListener] = []
        self._resume_on_cancel = False
        self._commands = asyncio.Lock()
        self._clock_muted = 0

    async def handle(self, command) -> S:
        """Apply one command and return the resulting state. Commands run one at a time."""
        async with self._commands:
            await self._dispatch(command)
            return self.snapshot()

    async def _dispatch(self, command) -> None:
        raise NotImplementedError

    @contextmanager
    def _quiet_clock(self) -> Iterator[None]:
        """Hold back clock driven publishes while a command updates the state."""
        self._clock_muted += 1
        try:
            yield
        finally:
            self._clock_muted -= 1

    def snapshot(self) -> S:
        return self.state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        self.state.clock_state = self.clock.state
        self.state.remaining_ms = self.clock.remaining_ms
        self.state.formatted_time = self.clock.formatted
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _on_clock_tick(self, clock: RoundClock) -> None:
        if not self._clock_muted:
            self._publish()

    def _on_clock_expired(self, clock: RoundClock) -> None:
        self.state.force_guess = True
        self.state.is_movement_allowed = False
        logger.info("Time is up, guess forced")

    def pause_for_exit(self) -> None:
        """Show the exit dialog, pausing a running clock."""
        if self.state.is_abandoned or self.state.show_exit_dialog:
            return
        self._resume_on_cancel = self.clock.is_running
        self.state.show_exit_dialog = True
        with self._quiet_clock():
            self.clock.pause()
        self._publish()

    def confirm_exit(self) -> None:
        """Abandon the game without committing anything."""
        if self.state.is_abandoned:
            return
        self.clock.cancel()
        self.state.show_exit_dialog = False
        self.state.is_abandoned = True
        logger.info("Game abandoned")
        self._publish()

    def cancel_exit(self) -> None:
        """Close the exit dialog and pick the countdown up where it stopped."""
        if not self.state.show_exit_dialog:
            return
        self.state.show_exit_dialog = False
        if self._resume_on_cancel:
            with self._quiet_clock():
                self.clock.resume()
        self._resume_on_cancel = False
        self._publish()

    def close(self) -> None:
        """Stop the clock and drop all listeners."""
        self.clock.cancel()
        self._listeners.clear()
