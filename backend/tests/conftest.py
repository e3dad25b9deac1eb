import os

# Settings are cached on first use, so point them at throwaway storage first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import asyncio
import random

import pytest
from fastapi.testclient import TestClient

from unmapped.database.gateway import InMemoryGateway
from unmapped.dependencies import GameServices, get_services
from unmapped.main import app
from unmapped.models.game import LatLng, LocationInfo, RoundResult
from unmapped.services.badges import AchievementService
from unmapped.services.clock import RoundClock
from unmapped.services.locations import LocationRepository
from unmapped.services.players import PlayerRepository

GAME_POINTS = [
    (52.52, 13.405),
    (48.8566, 2.3522),
    (40.7128, -74.006),
    (35.6762, 139.6503),
    (-33.8688, 151.2093),
    (-22.9068, -43.1729),
    (30.0444, 31.2357),
    (51.5072, -0.1276),
]

CHALLENGE_POINTS = [
    (69.6492, 18.9553),
    (-54.8019, -68.303),
    (27.9881, 86.925),
    (64.8378, -147.7164),
    (-25.3444, 131.0369),
    (47.5622, 13.6493),
]


class FakeGeo:
    """GeoLookup answering from a fixed table; everything else is unknown."""

    def __init__(self, table=None):
        self.table = table or {}
        self.calls = []

    async def resolve(self, lat, lng):
        self.calls.append((lat, lng))
        return self.table.get((lat, lng), LocationInfo())


class BlockingGeo(FakeGeo):
    """FakeGeo whose lookups wait until the test releases them."""

    def __init__(self, table=None):
        super().__init__(table)
        self.release = asyncio.Event()

    async def resolve(self, lat, lng):
        await self.release.wait()
        return await super().resolve(lat, lng)


def write_points(path, points):
    path.write_text("\n".join(f"{lat},{lng}" for lat, lng in points) + "\n", encoding="utf-8")


@pytest.fixture()
def gateway():
    return InMemoryGateway()


@pytest.fixture()
def geo():
    return FakeGeo()


@pytest.fixture()
def locations(tmp_path):
    write_points(tmp_path / "locations.txt", GAME_POINTS)
    write_points(tmp_path / "challengelocations.txt", CHALLENGE_POINTS)
    return LocationRepository(assets_dir=tmp_path, rng=random.Random(7))


@pytest.fixture()
def achievements(gateway):
    return AchievementService(gateway, mastery_threshold_meters=500.0)


@pytest.fixture()
def players(gateway):
    return PlayerRepository(gateway)


@pytest.fixture()
def manual_clock():
    return RoundClock(autotick=False)


@pytest.fixture()
def make_result():
    """Factory for round results with sensible defaults."""

    def factory(
        distance=1_000.0,
        time=60,
        actual=(52.52, 13.405),
        guess=(52.52, 13.405),
        actual_info=None,
        guess_info=None,
        score=10,
    ):
        return RoundResult(
            distance_meters=distance,
            shame_score=score,
            time_taken_seconds=time,
            actual_location=LatLng(latitude=actual[0], longitude=actual[1]),
            guess_location=LatLng(latitude=guess[0], longitude=guess[1]),
            actual_info=actual_info or LocationInfo(),
            guess_info=guess_info or LocationInfo(),
        )

    return factory


@pytest.fixture()
def services(gateway, geo, locations):
    return GameServices(
        gateway=gateway,
        geo=geo,
        locations=locations,
        clock_factory=lambda: RoundClock(autotick=False),
    )


@pytest.fixture()
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
