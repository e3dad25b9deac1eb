import asyncio

from unmapped.content import CURATED_MAPS
from unmapped.database.gateway import InMemoryGateway
from unmapped.services.badges import (
    PROGRESS_KEY,
    STATS_KEY,
    AchievementService,
    mastered_key,
    reset_all_data,
)


class SlowGateway(InMemoryGateway):
    """Yields to the event loop on every access so batches could interleave."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def put(self, key, value):
        await asyncio.sleep(0)
        await super().put(key, value)


async def test_batch_is_persisted(achievements, gateway, make_result):
    update = await achievements.process_game_results([make_result(time=5) for _ in range(5)])

    assert PROGRESS_KEY in gateway.data
    assert [s.badge.id for s in update.unlocked] == ["SMART_ASS"]

    progress = await achievements.load_progress()
    assert progress["SMART_ASS"].progress == 5


async def test_empty_batch_writes_nothing(achievements, gateway):
    update = await achievements.process_game_results([])
    assert update.unlocked == [] and update.progressed == []
    assert gateway.data == {}


async def test_corrupted_progress_falls_back_to_zero(achievements, gateway):
    gateway.data[PROGRESS_KEY] = b"{not json"
    progress = await achievements.load_progress()
    assert all(p.progress == 0 for p in progress.values())
    assert len(progress) == 21


async def test_streak_spans_batches(achievements, make_result):
    mid = make_result(distance=60_000)
    await achievements.process_game_results([mid, mid])
    await achievements.process_game_results([mid])
    progress = await achievements.load_progress()
    assert progress["CONSISTENTLY_MID"].progress == 3
    assert progress["CONSISTENTLY_MID"].streak == 3


async def test_concurrent_batches_do_not_lose_updates(make_result):
    service = AchievementService(SlowGateway())
    fast = make_result(time=1)
    await asyncio.gather(
        service.process_game_results([fast]),
        service.process_game_results([fast]),
        service.process_game_results([fast]),
    )
    progress = await service.load_progress()
    assert progress["SMART_ASS"].progress == 3


async def test_stats_are_recorded(achievements, make_result):
    await achievements.process_game_results([
        make_result(distance=2_000, time=10),
        make_result(distance=8_000, time=120),
    ])
    stats = await achievements.stats.get_stats()
    assert stats.total_rounds == 2
    assert stats.total_distance_km == 10.0
    assert stats.best_distance_km == 2.0
    assert stats.worst_distance_km == 8.0
    assert stats.fast_guesses == 1
    assert stats.slow_guesses == 1
    assert stats.avg_distance_km == 5.0


async def test_curated_result_tracks_mastery(achievements, gateway, make_result):
    conspiracy = CURATED_MAPS["conspiracy_core"]
    first = conspiracy.locations[0]
    await achievements.process_curated_result(
        make_result(distance=50, actual=(first.latitude, first.longitude)), conspiracy
    )

    assert await achievements.mastered_locations("conspiracy_core") == {first.key}
    assert mastered_key("conspiracy_core") in gateway.data

    statuses = {s.id: s for s in await achievements.map_statuses()}
    assert statuses["conspiracy_core"].mastered_locations == 1
    assert statuses["conspiracy_core"].total_locations == 7
    assert not statuses["conspiracy_core"].is_mastered


async def test_mastering_a_map_unlocks_its_badge(achievements, make_result):
    curated = CURATED_MAPS["pop_culture_hotspots"]
    update = None
    for location in curated.locations:
        update = await achievements.process_curated_result(
            make_result(distance=0, actual=(location.latitude, location.longitude)), curated
        )

    assert [s.badge.id for s in update.unlocked] == ["POP_CULTURE_MASTER"]
    statuses = {s.badge.id: s for s in await achievements.badge_statuses()}
    assert statuses["POP_CULTURE_MASTER"].unlocked
    assert statuses["POP_CULTURE_MASTER"].progress == 1


async def test_far_curated_guess_changes_nothing(achievements, gateway, make_result):
    curated = CURATED_MAPS["tourist_traps"]
    target = curated.locations[0]
    update = await achievements.process_curated_result(
        make_result(distance=5_000, actual=(target.latitude, target.longitude)), curated
    )
    assert update.unlocked == []
    assert gateway.data == {}


async def test_reset_all_data(achievements, players, gateway, make_result):
    await players.create_player("Alex")
    await achievements.process_game_results([make_result()])
    curated = CURATED_MAPS["tourist_traps"]
    target = curated.locations[0]
    await achievements.process_curated_result(
        make_result(distance=0, actual=(target.latitude, target.longitude)), curated
    )
    assert STATS_KEY in gateway.data

    await reset_all_data(achievements, players)

    assert gateway.data == {}
    assert await players.list_players() == []
