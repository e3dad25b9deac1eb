import random

import pytest

from unmapped.content import ROASTS_BY_TIER, ShameTier
from unmapped.models.game import LatLng
from unmapped.services.scoring import (
    calculate_shame_score,
    distance_meters,
    haversine_distance,
    mockery_tier,
    random_roast,
)


@pytest.mark.parametrize("distance, expected", [
    (0, 0),
    (500, 5),
    (2_000, 20),
    (25_000, 100),
    (250_000, 500),
    (500_000, 1000),
    (1_000_000, 2000),
    (5_000_000, 5000),
    (5_000_001, 5001),
    (20_000_000, 5001),
])
def test_score_band_edges(distance, expected):
    assert calculate_shame_score(distance) == expected


@pytest.mark.parametrize("distance, low, high", [
    (501, 6, 20),
    (1_999, 6, 20),
    (2_001, 21, 100),
    (24_999, 21, 100),
    (100_000, 101, 500),
    (400_000, 501, 1000),
    (750_000, 1001, 2000),
    (3_000_000, 2001, 5000),
])
def test_score_inside_bands(distance, low, high):
    assert low <= calculate_shame_score(distance) <= high


def test_score_rounds_half_up():
    # 250 m is half of the first band: 2.5 rounds up to 3
    assert calculate_shame_score(250) == 3
    # 1250 m is half of the second band: 6 + 7
    assert calculate_shame_score(1_250) == 13


def test_score_is_monotonic():
    previous = -1
    for distance in range(0, 6_000_000, 997):
        score = calculate_shame_score(distance)
        assert score >= previous
        previous = score


@pytest.mark.parametrize("distance, tier", [
    (0, ShameTier.SUSPICIOUSLY_GOOD),
    (500, ShameTier.SUSPICIOUSLY_GOOD),
    (501, ShameTier.BARE_MINIMUM),
    (2_000, ShameTier.BARE_MINIMUM),
    (10_000, ShameTier.MEDIOCRE),
    (100_000, ShameTier.VAGUELY_IN_THE_AREA),
    (300_000, ShameTier.WRONG_ZIP_CODE),
    (900_000, ShameTier.DRUNK_COMPASS),
    (5_000_000, ShameTier.COLUMBUS),
    (5_000_001, ShameTier.FLAT_EARTHER),
])
def test_mockery_tier(distance, tier):
    assert mockery_tier(distance) == tier


def test_random_roast_comes_from_tier():
    rng = random.Random(3)
    for _ in range(20):
        assert random_roast(10_000_000, rng) in ROASTS_BY_TIER[ShameTier.FLAT_EARTHER]


def test_haversine_berlin_paris():
    assert haversine_distance(52.52, 13.405, 48.8566, 2.3522) == pytest.approx(878, abs=5)


def test_distance_meters_same_point_is_zero():
    point = LatLng(latitude=10.0, longitude=20.0)
    assert distance_meters(point, point) == 0
