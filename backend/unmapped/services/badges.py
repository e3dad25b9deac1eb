import asyncio
from typing import Iterable, List, Optional, Sequence, Set

from pydantic import TypeAdapter

from ..config import get_settings
from ..content import BADGE_DEFINITIONS, CURATED_MAPS, CuratedMap
from ..database.gateway import PersistenceGateway, read_json, write_json
from ..logger import get_logger
from ..models.badges import BadgeDefinition, BadgeProgress, BadgeStatus, BadgeUpdate, CuratedMapStatus
from ..models.game import RoundResult
from ..models.player import GameStats
from .achievements import (
    DEFAULT_RULES,
    ProgressMap,
    Rule,
    badge_status,
    evaluate_mastery,
    evaluate_rounds,
    initial_progress,
    summarize,
)

logger = get_logger("badges")

PROGRESS_KEY = "badges:progress"
STATS_KEY = "stats"

_progress_adapter = TypeAdapter(List[BadgeProgress])
_mastered_adapter = TypeAdapter(List[str])
_stats_adapter = TypeAdapter(GameStats)


def mastered_key(map_id: str) -> str:
    return f"maps:{map_id}:mastered"


class StatsRepository:
    """Aggregated statistics over every processed round."""

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def get_stats(self) -> GameStats:
        return await read_json(self.gateway, STATS_KEY, _stats_adapter, GameStats)

    async def record(self, results: Iterable[RoundResult]) -> GameStats:
        stats = await self.get_stats()
        for result in results:
            distance_km = result.distance_meters / 1000.0
            stats.total_rounds += 1
            stats.total_distance_km += distance_km
            if stats.best_distance_km is None or distance_km < stats.best_distance_km:
                stats.best_distance_km = distance_km
            if stats.worst_distance_km is None or distance_km > stats.worst_distance_km:
                stats.worst_distance_km = distance_km
            if result.time_taken_seconds <= 30:
                stats.fast_guesses += 1
            if result.time_taken_seconds >= 120:
                stats.slow_guesses += 1
        await write_json(self.gateway, STATS_KEY, _stats_adapter, stats)
        return stats

    async def reset(self) -> None:
        await self.gateway.delete(STATS_KEY)


class AchievementService:
    """
    Loads, evaluates and stores badge progress.

    Each batch reads the stored snapshot, folds its rounds through the
    rules and writes the snapshot back. The read-modify-write runs under
    an ``asyncio.Lock`` so batches from different sessions never
    interleave. This assumes one writer process per store.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        definitions: Sequence[BadgeDefinition] = BADGE_DEFINITIONS,
        rules: Sequence[Rule] = DEFAULT_RULES,
        stats: Optional[StatsRepository] = None,
        mastery_threshold_meters: Optional[float] = None,
    ):
        self.gateway = gateway
        self.definitions = list(definitions)
        self.definitions_by_id = {d.id: d for d in self.definitions}
        self.rules = list(rules)
        self.stats = stats or StatsRepository(gateway)
        if mastery_threshold_meters is None:
            mastery_threshold_meters = get_settings().MASTERY_THRESHOLD_METERS
        self.mastery_threshold_meters = mastery_threshold_meters
        self._lock = asyncio.Lock()

    async def load_progress(self) -> ProgressMap:
        """Stored progress for every known badge, zeroed where nothing is stored."""
        progress = initial_progress(self.definitions)
        stored = await read_json(self.gateway, PROGRESS_KEY, _progress_adapter, list)
        for item in stored:
            if item.badge_id in progress:
                progress[item.badge_id] = item
        return progress

    async def save_progress(self, progress: ProgressMap) -> None:
        await write_json(self.gateway, PROGRESS_KEY, _progress_adapter, list(progress.values()))

    async def mastered_locations(self, map_id: str) -> Set[str]:
        return set(await read_json(self.gateway, mastered_key(map_id), _mastered_adapter, list))

    async def process_game_results(self, results: Sequence[RoundResult]) -> BadgeUpdate:
        """
        Evaluate a finished game's rounds as one batch.

        Also folds the rounds into the global statistics.

        Args:
            results: Round results in the order they were played

        Returns:
            Badges unlocked or progressed by this batch
        """
        if not results:
            return BadgeUpdate()

        async with self._lock:
            before = await self.load_progress()
            after = evaluate_rounds(before, results, self.rules, self.definitions_by_id)
            await self.save_progress(after)
            await self.stats.record(results)

        update = summarize(before, after, self.definitions)
        logger.info(
            "Processed %d rounds: %d badges unlocked, %d progressed",
            len(results), len(update.unlocked), len(update.progressed),
        )
        return update

    async def process_curated_result(self, result: RoundResult, curated_map: CuratedMap) -> BadgeUpdate:
        """Record a curated-map guess right away and unlock the map badge when mastered."""
        async with self._lock:
            before = await self.load_progress()
            mastered = await self.mastered_locations(curated_map.id)
            after, now_mastered = evaluate_mastery(
                before, mastered, result, curated_map,
                threshold_meters=self.mastery_threshold_meters,
                definitions=self.definitions_by_id,
            )
            if now_mastered != mastered:
                await write_json(self.gateway, mastered_key(curated_map.id), _mastered_adapter, sorted(now_mastered))
            if after is not before:
                await self.save_progress(after)

        update = summarize(before, after, self.definitions)
        for status in update.unlocked:
            logger.info("Unlocked %s", status.badge.id)
        return update

    async def badge_statuses(self) -> List[BadgeStatus]:
        progress = await self.load_progress()
        return [badge_status(d, progress.get(d.id)) for d in self.definitions]

    async def map_statuses(self) -> List[CuratedMapStatus]:
        statuses = []
        for curated_map in CURATED_MAPS.values():
            map_keys = {loc.key for loc in curated_map.locations}
            mastered = await self.mastered_locations(curated_map.id) & map_keys
            statuses.append(CuratedMapStatus(
                id=curated_map.id,
                name=curated_map.name,
                badge_id=curated_map.badge_id,
                total_locations=len(map_keys),
                mastered_locations=len(mastered),
                is_mastered=bool(map_keys) and mastered == map_keys,
            ))
        return statuses

    async def reset(self) -> None:
        async with self._lock:
            await self.gateway.delete(PROGRESS_KEY)
            for map_id in CURATED_MAPS:
                await self.gateway.delete(mastered_key(map_id))
            await self.stats.reset()


async def reset_all_data(achievements: AchievementService, players) -> None:
    """Forget every player, badge, mastered location and statistic."""
    await players.reset()
    await achievements.reset()
    logger.info("All stored data cleared")
