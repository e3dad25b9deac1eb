import asyncio
from typing import Awaitable, Callable, Optional

from ..logger import get_logger
from ..models.game import ClockState

logger = get_logger("clock")

ClockListener = Callable[["RoundClock"], None]


class RoundClock:
    """
    Countdown timer for a single round or turn.

    States go IDLE -> RUNNING -> (PAUSED <-> RUNNING) -> EXPIRED. While
    running, an asyncio task calls :meth:`tick` once per interval and each
    tick removes one second from the remaining time. Reaching zero moves the
    clock to EXPIRED and calls ``on_expire`` exactly once. An expired clock
    refuses :meth:`start` until :meth:`reset` is called. ``on_expire`` runs
    before the final ``on_tick``.

    ``pause`` and ``resume`` on the wrong state are ignored, since they
    usually come from a UI racing the countdown.

    Pass ``autotick=False`` to drive the clock by calling :meth:`tick`
    directly.
    """

    STEP_MS = 1000

    def __init__(
        self,
        on_tick: Optional[ClockListener] = None,
        on_expire: Optional[ClockListener] = None,
        autotick: bool = True,
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.autotick = autotick
        self.interval = interval
        self._sleep = sleep
        self.state = ClockState.IDLE
        self.duration_ms = 0
        self.remaining_ms = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.state == ClockState.RUNNING

    @property
    def elapsed_seconds(self) -> int:
        """Whole seconds spent since the countdown started."""
        return max(0, self.duration_ms - self.remaining_ms) // 1000

    @property
    def formatted(self) -> str:
        """Remaining time as ``mm:ss``."""
        return format_millis(self.remaining_ms)

    def start(self, duration_ms: int) -> None:
        """Begin counting down from ``duration_ms``."""
        if self.state == ClockState.EXPIRED:
            logger.debug("Ignoring start on an expired clock")
            return
        self._cancel_task()
        self.duration_ms = duration_ms
        self.remaining_ms = duration_ms
        self.state = ClockState.RUNNING
        self._schedule()
        self._emit()

    def restart(self, duration_ms: int) -> None:
        """Reset the clock and start a fresh countdown."""
        self.reset()
        self.start(duration_ms)

    def reset(self) -> None:
        self._cancel_task()
        self.state = ClockState.IDLE
        self.remaining_ms = self.duration_ms

    def pause(self) -> None:
        if self.state != ClockState.RUNNING:
            logger.debug("Ignoring pause in state %s", self.state.value)
            return
        self._cancel_task()
        self.state = ClockState.PAUSED
        self._emit()

    def resume(self) -> None:
        if self.state != ClockState.PAUSED or self.remaining_ms <= 0:
            logger.debug("Ignoring resume in state %s", self.state.value)
            return
        self.state = ClockState.RUNNING
        self._schedule()
        self._emit()

    def cancel(self) -> None:
        """Stop the countdown for good, keeping the remaining time."""
        self._cancel_task()
        if self.state != ClockState.EXPIRED:
            self.state = ClockState.IDLE

    def tick(self) -> None:
        """Remove one second from a running countdown."""
        if self.state != ClockState.RUNNING:
            return
        self.remaining_ms = max(0, self.remaining_ms - self.STEP_MS)
        if self.remaining_ms == 0:
            self.state = ClockState.EXPIRED
            self._cancel_task()
            logger.info("Round clock expired")
            if self.on_expire:
                self.on_expire(self)
            self._emit()
            return
        self._emit()

    def _emit(self) -> None:
        if self.on_tick:
            self.on_tick(self)

    def _schedule(self) -> None:
        if not self.autotick:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self.state == ClockState.RUNNING:
            await self._sleep(self.interval)
            self.tick()

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # tick() runs inside the task; it exits on its own once not RUNNING.
        if task is not asyncio.current_task():
            task.cancel()


def format_millis(millis: int) -> str:
    """Format milliseconds as ``mm:ss``."""
    total_seconds = max(0, millis) // 1000
    return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}"
