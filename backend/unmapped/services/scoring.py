from math import radians, sin, cos, sqrt, atan2, floor
import random
from typing import List, Tuple

from ..content import FALLBACK_ROAST, ROASTS_BY_TIER, ShameTier
from ..models.game import LatLng

# Upper bound of each band in meters with the score range it covers.
# Upper bounds are inclusive.
SCORE_BANDS: List[Tuple[float, float, int, int]] = [
    (0.0, 500.0, 0, 5),
    (500.0, 2_000.0, 6, 14),
    (2_000.0, 25_000.0, 21, 79),
    (25_000.0, 250_000.0, 101, 399),
    (250_000.0, 500_000.0, 501, 499),
    (500_000.0, 1_000_000.0, 1001, 999),
    (1_000_000.0, 5_000_000.0, 2001, 2999),
]
MAX_SHAME_SCORE = 5001

TIER_THRESHOLDS: List[Tuple[float, ShameTier]] = [
    (500.0, ShameTier.SUSPICIOUSLY_GOOD),
    (2_000.0, ShameTier.BARE_MINIMUM),
    (25_000.0, ShameTier.MEDIOCRE),
    (250_000.0, ShameTier.VAGUELY_IN_THE_AREA),
    (500_000.0, ShameTier.WRONG_ZIP_CODE),
    (1_000_000.0, ShameTier.DRUNK_COMPASS),
    (5_000_000.0, ShameTier.COLUMBUS),
]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: Coordinates of the first point (degrees)
        lat2, lon2: Coordinates of the second point (degrees)

    Returns:
        Distance in kilometers
    """
    R = 6371.0

    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    a = sin(dlat / 2)**2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2)**2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return R * c


def distance_meters(a: LatLng, b: LatLng) -> float:
    """Great circle distance between two points in meters."""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude) * 1000.0


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def calculate_shame_score(distance_meters: float) -> int:
    """
    Convert a guess distance into a shame score.

    Scoring bands (higher is worse):
    - <= 500m: 0-5
    - <= 2km: 6-20
    - <= 25km: 21-100
    - <= 250km: 101-500
    - <= 500km: 501-1000
    - <= 1000km: 1001-2000
    - <= 5000km: 2001-5000
    - beyond: 5001

    Within a band the score grows linearly with the fraction of the band
    covered, rounded half up.

    Args:
        distance_meters: Distance between guess and target in meters

    Returns:
        Shame score
    """
    for lower, upper, base, span in SCORE_BANDS:
        if distance_meters <= upper:
            fraction = (distance_meters - lower) / (upper - lower)
            return base + _round_half_up(fraction * span)
    return MAX_SHAME_SCORE


def mockery_tier(distance_meters: float) -> ShameTier:
    """Severity tier used to pick a roast for a distance."""
    for threshold, tier in TIER_THRESHOLDS:
        if distance_meters <= threshold:
            return tier
    return ShameTier.FLAT_EARTHER


def random_roast(distance_meters: float, rng: random.Random = None) -> str:
    """Pick a random mockery line matching the distance's tier."""
    lines = ROASTS_BY_TIER.get(mockery_tier(distance_meters))
    if not lines:
        return FALLBACK_ROAST
    return (rng or random).choice(lines)
