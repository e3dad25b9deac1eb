import asyncio

from unmapped.models.game import ClockState
from unmapped.services.clock import RoundClock, format_millis


def test_expires_once_after_duration():
    expired = []
    clock = RoundClock(on_expire=expired.append, autotick=False)
    clock.start(5_000)

    for _ in range(5):
        clock.tick()

    assert clock.remaining_ms == 0
    assert clock.state == ClockState.EXPIRED
    assert len(expired) == 1

    clock.tick()
    clock.tick()
    assert len(expired) == 1


def test_resume_continues_from_paused_value(manual_clock):
    manual_clock.start(10_000)
    for _ in range(3):
        manual_clock.tick()
    manual_clock.pause()

    manual_clock.tick()
    assert manual_clock.remaining_ms == 7_000

    manual_clock.resume()
    assert manual_clock.state == ClockState.RUNNING
    assert manual_clock.remaining_ms == 7_000
    manual_clock.tick()
    assert manual_clock.remaining_ms == 6_000


def test_invalid_pause_and_resume_are_ignored(manual_clock):
    manual_clock.resume()
    assert manual_clock.state == ClockState.IDLE

    manual_clock.pause()
    assert manual_clock.state == ClockState.IDLE

    manual_clock.start(3_000)
    manual_clock.resume()
    assert manual_clock.state == ClockState.RUNNING


def test_start_refused_while_expired_until_reset(manual_clock):
    manual_clock.start(1_000)
    manual_clock.tick()
    assert manual_clock.state == ClockState.EXPIRED

    manual_clock.start(10_000)
    assert manual_clock.state == ClockState.EXPIRED
    assert manual_clock.remaining_ms == 0

    manual_clock.restart(10_000)
    assert manual_clock.state == ClockState.RUNNING
    assert manual_clock.remaining_ms == 10_000


def test_elapsed_and_formatted(manual_clock):
    manual_clock.start(120_000)
    assert manual_clock.formatted == "02:00"
    for _ in range(5):
        manual_clock.tick()
    assert manual_clock.elapsed_seconds == 5
    assert manual_clock.formatted == "01:55"


def test_format_millis():
    assert format_millis(0) == "00:00"
    assert format_millis(61_999) == "01:01"
    assert format_millis(-5) == "00:00"


def test_tick_listener_sees_each_second():
    seen = []
    clock = RoundClock(on_tick=lambda c: seen.append(c.remaining_ms), autotick=False)
    clock.start(3_000)
    clock.tick()
    clock.tick()
    assert seen == [3_000, 2_000, 1_000]


async def _fast_sleep(_):
    await asyncio.sleep(0)


async def test_autotick_counts_down_to_expiry():
    expired = asyncio.Event()
    clock = RoundClock(on_expire=lambda c: expired.set(), sleep=_fast_sleep)
    clock.start(3_000)

    await asyncio.wait_for(expired.wait(), timeout=1)
    assert clock.remaining_ms == 0
    assert clock.state == ClockState.EXPIRED


async def test_cancel_stops_the_countdown():
    clock = RoundClock(sleep=_fast_sleep)
    clock.start(60_000)
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    clock.cancel()
    remaining = clock.remaining_ms

    for _ in range(10):
        await asyncio.sleep(0)

    assert clock.state == ClockState.IDLE
    assert clock.remaining_ms == remaining


async def test_pause_stops_background_ticks():
    clock = RoundClock(sleep=_fast_sleep)
    clock.start(60_000)
    await asyncio.sleep(0)
    clock.pause()
    remaining = clock.remaining_ms

    for _ in range(10):
        await asyncio.sleep(0)

    assert clock.remaining_ms == remaining
    clock.cancel()
