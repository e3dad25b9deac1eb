from unmapped.content import BADGES_BY_ID, CuratedMap
from unmapped.models.badges import BadgeDefinition, BadgeProgress
from unmapped.models.game import Continent, LatLng, LocationInfo
from unmapped.services.achievements import (
    CounterRule,
    StreakRule,
    evaluate_mastery,
    evaluate_round,
    evaluate_rounds,
    initial_progress,
    summarize,
)

CONTINENT_COUNTRY = {
    Continent.EU: "FR",
    Continent.AS: "JP",
    Continent.AF: "EG",
    Continent.NA: "US",
    Continent.SA: "BR",
    Continent.OC: "AU",
}


def info(continent, country=None):
    return LocationInfo(country_code=country or CONTINENT_COUNTRY[continent], continent=continent)


def fresh():
    return initial_progress(BADGES_BY_ID.values())


def test_counter_never_exceeds_threshold(make_result):
    fast = [make_result(time=10) for _ in range(20)]
    progress = evaluate_rounds(fresh(), fast)
    assert progress["SMART_ASS"].progress == BADGES_BY_ID["SMART_ASS"].required_progress == 5


def test_streak_progress_never_decreases(make_result):
    mid = make_result(distance=75_000)
    near = make_result(distance=100)
    progress = fresh()
    history = []
    for result in [mid, mid, mid, near, mid, mid]:
        progress = evaluate_round(progress, result)
        history.append(progress["CONSISTENTLY_MID"].progress)

    assert history == [1, 2, 3, 3, 3, 3]
    assert progress["CONSISTENTLY_MID"].streak == 2


def test_streak_progress_is_longest_streak(make_result):
    far = [make_result(distance=200_000) for _ in range(12)]
    progress = evaluate_rounds(fresh(), far)
    assert progress["CHRONICALLY_WRONG"].progress == 12
    assert progress["CHRONICALLY_WRONG"].streak == 12


def test_continent_bitmask_unlocks_after_six_distinct_misses(make_result):
    progress = fresh()
    guess_everywhere = {
        Continent.EU: Continent.AS,
        Continent.AS: Continent.EU,
        Continent.AF: Continent.EU,
        Continent.NA: Continent.EU,
        Continent.SA: Continent.EU,
        Continent.OC: Continent.EU,
    }
    counts = []
    for actual, guess in guess_everywhere.items():
        progress = evaluate_round(progress, make_result(actual_info=info(actual), guess_info=info(guess)))
        counts.append(progress["GLOBAL_MENACE"].progress)

    assert counts == [1, 2, 3, 4, 5, 6]
    assert progress["GLOBAL_MENACE"].bitmask == 0b111111

    again = evaluate_round(progress, make_result(actual_info=info(Continent.AF), guess_info=info(Continent.EU)))
    assert again["GLOBAL_MENACE"].progress == 6


def test_unknown_continent_is_ignored(make_result):
    result = make_result(
        actual_info=LocationInfo(country_code="ZZ", continent=None),
        guess_info=info(Continent.EU),
    )
    progress = evaluate_round(fresh(), result)
    assert progress["GLOBAL_MENACE"].bitmask == 0
    assert progress["CONTINENTAL_DRIFT"].progress == 0
    assert progress["EUROCENTRIC_MUCH"].progress == 0


def test_failed_lookup_leaves_geography_badges_alone(make_result):
    result = make_result(actual_info=info(Continent.EU, "DE"), guess_info=LocationInfo())
    progress = evaluate_round(fresh(), result)
    assert progress["NATIONAL_EMBARRASSMENT"].progress == 0
    assert progress["CULTURAL_MENACE"].progress == 0
    assert progress["US_AMERICAN"].progress == 0


def test_geography_mismatch_counters(make_result):
    result = make_result(actual_info=info(Continent.EU, "DE"), guess_info=info(Continent.EU, "PL"))
    progress = evaluate_round(fresh(), result)
    assert progress["NATIONAL_EMBARRASSMENT"].progress == 1
    assert progress["CULTURAL_MENACE"].progress == 1
    assert progress["CONTINENTAL_DRIFT"].progress == 0

    eurocentric = make_result(actual_info=info(Continent.AS), guess_info=info(Continent.EU))
    progress = evaluate_round(progress, eurocentric)
    assert progress["EUROCENTRIC_MUCH"].progress == 1
    assert progress["CONTINENTAL_DRIFT"].progress == 1
    assert progress["US_AMERICAN"].progress == 1


def test_latitude_and_longitude_losers(make_result):
    # Three degrees due north is about 333 km along the meridian
    north = make_result(actual=(10.0, 20.0), guess=(13.0, 20.0))
    progress = evaluate_round(fresh(), north)
    assert progress["LATITUDE_LOSER"].progress == 1
    assert progress["LONGITUDE_LOSER"].progress == 0

    east = make_result(actual=(10.0, 20.0), guess=(10.0, 23.0))
    progress = evaluate_round(progress, east)
    assert progress["LONGITUDE_LOSER"].progress == 1


def test_wrong_hemisphere_streak(make_result):
    flipped = make_result(actual=(10.0, 0.0), guess=(-10.0, 0.0))
    progress = evaluate_rounds(fresh(), [flipped, flipped])
    assert progress["FLAT_EARTHER"].progress == 2


def test_distance_counters(make_result):
    progress = evaluate_rounds(fresh(), [
        make_result(distance=10_000),
        make_result(distance=100_000),
        make_result(distance=2_000_000),
    ])
    assert progress["LOST_TOURIST"].progress == 1
    assert progress["BARE_MINIMUM"].progress == 1
    assert progress["COLUMBUS"].progress == 1
    assert progress["GEOGRAPHY_DROPOUT"].progress == 1


def test_evaluate_round_does_not_touch_input(make_result):
    before = fresh()
    evaluate_round(before, make_result(time=5))
    assert before["SMART_ASS"].progress == 0


def test_rules_can_be_tested_in_isolation(make_result):
    definitions = {"EVEN": BadgeDefinition(id="EVEN", name="Even", description="", required_progress=2)}
    rule = CounterRule("EVEN", lambda r: r.time_taken_seconds % 2 == 0)
    progress = evaluate_rounds({}, [make_result(time=t) for t in (2, 3, 4, 6)], [rule], definitions)
    assert progress == {"EVEN": BadgeProgress(badge_id="EVEN", progress=2)}


def test_streak_rule_resets_on_failure(make_result):
    definitions = {"HOT": BadgeDefinition(id="HOT", name="Hot", description="", required_progress=10)}
    rule = StreakRule("HOT", lambda r: r.distance_meters < 1_000)
    results = [make_result(distance=d) for d in (10, 10, 5_000, 10)]
    progress = evaluate_rounds({}, results, [rule], definitions)
    assert progress["HOT"].progress == 2
    assert progress["HOT"].streak == 1


def _small_map():
    points = [(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)]
    return CuratedMap(
        "tourist_traps", "Tourist Traps", "TOURIST_TRAPS_MASTER",
        [LatLng(latitude=a, longitude=b) for a, b in points],
    )


def test_mastery_unlocks_after_every_location(make_result):
    curated = _small_map()
    progress, mastered = fresh(), set()

    for i, location in enumerate(curated.locations):
        result = make_result(distance=100, actual=(location.latitude, location.longitude))
        progress, mastered = evaluate_mastery(progress, mastered, result, curated)
        expected = 1 if i == len(curated.locations) - 1 else 0
        assert progress["TOURIST_TRAPS_MASTER"].progress == expected

    again = make_result(distance=10, actual=(1.0, 1.0))
    progress, mastered = evaluate_mastery(progress, mastered, again, curated)
    assert progress["TOURIST_TRAPS_MASTER"].progress == 1
    assert mastered == {"1.0,1.0", "2.0,2.0", "3.0,3.0"}


def test_mastery_ignores_far_guesses(make_result):
    curated = _small_map()
    result = make_result(distance=501, actual=(1.0, 1.0))
    progress, mastered = evaluate_mastery(fresh(), set(), result, curated)
    assert mastered == set()
    assert progress["TOURIST_TRAPS_MASTER"].progress == 0


def test_summarize_separates_unlocked_and_progressed(make_result):
    before = fresh()
    before["SMART_ASS"] = BadgeProgress(badge_id="SMART_ASS", progress=4)
    after = evaluate_round(before, make_result(time=5, distance=10_000))

    update = summarize(before, after, BADGES_BY_ID.values())
    assert [s.badge.id for s in update.unlocked] == ["SMART_ASS"]
    assert "LOST_TOURIST" in [s.badge.id for s in update.progressed]
    assert all(s.unlocked for s in update.unlocked)
