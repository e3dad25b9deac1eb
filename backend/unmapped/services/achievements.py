"""
Badge rules and the pure reducer that applies them.

Every rule looks at one :class:`RoundResult` and returns an updated
:class:`BadgeProgress` for its badge. Nothing here touches storage; the
caller loads a progress map, folds a batch of results through
:func:`evaluate_round` and saves the returned map.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from ..content import BADGES_BY_ID, FAMOUS_COUNTRIES, CuratedMap
from ..models.badges import BadgeDefinition, BadgeProgress, BadgeStatus, BadgeUpdate
from ..models.game import Continent, RoundResult
from .scoring import haversine_distance

Predicate = Callable[[RoundResult], bool]
ProgressMap = Dict[str, BadgeProgress]


# Predicates

def time_at_most(seconds: int) -> Predicate:
    return lambda r: r.time_taken_seconds <= seconds


def time_at_least(seconds: int) -> Predicate:
    return lambda r: r.time_taken_seconds >= seconds


def distance_between(low_m: float, high_m: float) -> Predicate:
    """Distance inside ``[low_m, high_m]``."""
    return lambda r: low_m <= r.distance_meters <= high_m


def distance_above(meters: float) -> Predicate:
    return lambda r: r.distance_meters > meters


def latitude_offset_km(r: RoundResult) -> float:
    """Distance from the target to the guess's latitude, along the target meridian."""
    actual = r.actual_location
    return haversine_distance(actual.latitude, actual.longitude, r.guess_location.latitude, actual.longitude)


def longitude_offset_km(r: RoundResult) -> float:
    """Distance from the target to the guess's longitude, along the target parallel."""
    actual = r.actual_location
    return haversine_distance(actual.latitude, actual.longitude, actual.latitude, r.guess_location.longitude)


def continent_mismatch(r: RoundResult) -> bool:
    actual, guess = r.actual_info.continent, r.guess_info.continent
    return actual is not None and guess is not None and actual != guess


def missed_country(country_codes: Iterable[str]) -> Predicate:
    """Target is in one of ``country_codes`` but the guess landed in another country."""
    codes = frozenset(country_codes)

    def predicate(r: RoundResult) -> bool:
        actual, guess = r.actual_info.country_code, r.guess_info.country_code
        return actual in codes and guess is not None and guess != actual

    return predicate


def eurocentric(r: RoundResult) -> bool:
    actual = r.actual_info.continent
    return r.guess_info.continent == Continent.EU and actual is not None and actual != Continent.EU


def wrong_hemisphere(r: RoundResult) -> bool:
    return r.actual_location.latitude * r.guess_location.latitude < 0


# Rules

@dataclass(frozen=True)
class CounterRule:
    """+1 whenever the predicate holds, capped at the required progress."""
    badge_id: str
    predicate: Predicate

    def apply(self, progress: BadgeProgress, definition: BadgeDefinition, result: RoundResult) -> BadgeProgress:
        if progress.progress >= definition.required_progress or not self.predicate(result):
            return progress
        return progress.model_copy(update={"progress": progress.progress + 1})


@dataclass(frozen=True)
class StreakRule:
    """Tracks consecutive rounds matching the predicate; progress is the best streak."""
    badge_id: str
    predicate: Predicate

    def apply(self, progress: BadgeProgress, definition: BadgeDefinition, result: RoundResult) -> BadgeProgress:
        streak = progress.streak + 1 if self.predicate(result) else 0
        best = max(progress.progress, streak)
        return progress.model_copy(update={"streak": streak, "progress": best})


@dataclass(frozen=True)
class ContinentMaskRule:
    """Sets the actual continent's bit on a mismatch; progress is the bit count."""
    badge_id: str
    predicate: Predicate = continent_mismatch

    def apply(self, progress: BadgeProgress, definition: BadgeDefinition, result: RoundResult) -> BadgeProgress:
        continent = result.actual_info.continent
        if continent is None or not self.predicate(result):
            return progress
        bitmask = progress.bitmask | (1 << continent.bit_index)
        return progress.model_copy(update={"bitmask": bitmask, "progress": bin(bitmask).count("1")})


Rule = Union[CounterRule, StreakRule, ContinentMaskRule]


DEFAULT_RULES: Tuple[Rule, ...] = (
    CounterRule("SMART_ASS", time_at_most(30)),
    CounterRule("CRITICAL_OVERTHINKER", time_at_least(119)),
    CounterRule("LOST_TOURIST", distance_between(2_000, 25_000)),
    CounterRule("BARE_MINIMUM", distance_between(25_000, 250_000)),
    CounterRule("COLUMBUS", distance_between(1_000_000, 5_000_000)),
    CounterRule("GEOGRAPHY_DROPOUT", distance_above(100_000)),
    CounterRule("LATITUDE_LOSER", lambda r: latitude_offset_km(r) > 200),
    CounterRule("LONGITUDE_LOSER", lambda r: longitude_offset_km(r) > 200),
    CounterRule("CONTINENTAL_DRIFT", continent_mismatch),
    CounterRule("US_AMERICAN", continent_mismatch),
    CounterRule("NATIONAL_EMBARRASSMENT", missed_country({"DE"})),
    CounterRule("EUROCENTRIC_MUCH", eurocentric),
    CounterRule("CULTURAL_MENACE", missed_country(FAMOUS_COUNTRIES)),
    ContinentMaskRule("GLOBAL_MENACE"),
    StreakRule("CONSISTENTLY_MID", distance_between(50_000, 100_000)),
    StreakRule("CHRONICALLY_WRONG", distance_above(100_000)),
    StreakRule("FLAT_EARTHER", wrong_hemisphere),
)


# Reducer

def initial_progress(definitions: Iterable[BadgeDefinition]) -> ProgressMap:
    return {d.id: BadgeProgress(badge_id=d.id) for d in definitions}


def evaluate_round(
    progress_map: ProgressMap,
    result: RoundResult,
    rules: Iterable[Rule] = DEFAULT_RULES,
    definitions: Dict[str, BadgeDefinition] = BADGES_BY_ID,
) -> ProgressMap:
    """
    Apply every rule to one round result.

    Returns a new map; ``progress_map`` is left untouched. Rules for badges
    without a definition are skipped.
    """
    updated = dict(progress_map)
    for rule in rules:
        definition = definitions.get(rule.badge_id)
        if definition is None:
            continue
        current = updated.get(rule.badge_id) or BadgeProgress(badge_id=rule.badge_id)
        updated[rule.badge_id] = rule.apply(current, definition, result)
    return updated


def evaluate_rounds(
    progress_map: ProgressMap,
    results: Iterable[RoundResult],
    rules: Iterable[Rule] = DEFAULT_RULES,
    definitions: Dict[str, BadgeDefinition] = BADGES_BY_ID,
) -> ProgressMap:
    """Fold a whole game's results, in order, through :func:`evaluate_round`."""
    rules = list(rules)
    for result in results:
        progress_map = evaluate_round(progress_map, result, rules, definitions)
    return progress_map


def evaluate_mastery(
    progress_map: ProgressMap,
    mastered: Set[str],
    result: RoundResult,
    curated_map: CuratedMap,
    threshold_meters: float = 500.0,
    definitions: Dict[str, BadgeDefinition] = BADGES_BY_ID,
) -> Tuple[ProgressMap, Set[str]]:
    """
    Record a curated-map guess and unlock the map's badge once every
    location has been guessed within ``threshold_meters``.

    Args:
        progress_map: Current badge progress
        mastered: ``lat,lng`` keys already guessed correctly on this map
        result: Result of the round just played
        curated_map: Map the round belongs to
        threshold_meters: Largest distance that counts as correct

    Returns:
        Updated progress map and mastered set
    """
    if result.distance_meters > threshold_meters:
        return progress_map, mastered

    mastered = set(mastered) | {result.actual_location.key}
    map_keys = {loc.key for loc in curated_map.locations}
    if not map_keys or not map_keys <= mastered:
        return progress_map, mastered

    definition = definitions.get(curated_map.badge_id)
    if definition is None:
        return progress_map, mastered

    updated = dict(progress_map)
    current = updated.get(definition.id) or BadgeProgress(badge_id=definition.id)
    updated[definition.id] = current.model_copy(update={"progress": definition.required_progress})
    return updated, mastered


def is_unlocked(progress: Optional[BadgeProgress], definition: BadgeDefinition) -> bool:
    return progress is not None and progress.progress >= definition.required_progress


def badge_status(definition: BadgeDefinition, progress: Optional[BadgeProgress]) -> BadgeStatus:
    value = progress.progress if progress else 0
    return BadgeStatus(badge=definition, progress=value, unlocked=is_unlocked(progress, definition))


def summarize(
    before: ProgressMap,
    after: ProgressMap,
    definitions: Iterable[BadgeDefinition],
) -> BadgeUpdate:
    """
    Compare two progress maps.

    A badge is "unlocked" when it crossed its threshold between ``before``
    and ``after`` and "progressed" when its progress grew without unlocking.
    """
    unlocked: List[BadgeStatus] = []
    progressed: List[BadgeStatus] = []
    for definition in definitions:
        old, new = before.get(definition.id), after.get(definition.id)
        old_value = old.progress if old else 0
        new_value = new.progress if new else 0
        if is_unlocked(new, definition) and not is_unlocked(old, definition):
            unlocked.append(badge_status(definition, new))
        elif new_value > old_value:
            progressed.append(badge_status(definition, new))
    return BadgeUpdate(unlocked=unlocked, progressed=progressed)
