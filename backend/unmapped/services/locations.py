import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from ..config import get_settings
from ..logger import get_logger
from ..models.game import LatLng

logger = get_logger("locations")

ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


def parse_locations(lines: Iterable[str]) -> List[LatLng]:
    """
    Parse ``latitude,longitude`` lines into points.

    Blank lines, lines with the wrong number of fields, unparsable numbers
    and out-of-range coordinates are skipped.
    """
    locations = []
    for number, raw in enumerate(lines, 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(",")
        if len(parts) != 2:
            logger.warning("Skipping line %d: expected 2 fields, got %d", number, len(parts))
            continue
        try:
            lat, lng = float(parts[0]), float(parts[1])
            locations.append(LatLng(latitude=lat, longitude=lng))
        except ValueError:
            # pydantic's ValidationError is a ValueError too
            logger.warning("Skipping malformed location on line %d: %r", number, line)
    return locations


class LocationRepository:
    """Loads and caches location pools from text assets."""

    def __init__(self, assets_dir: Path = ASSETS_DIR, rng: Optional[random.Random] = None):
        self.assets_dir = Path(assets_dir)
        self.rng = rng or random.Random()
        self._cache: Dict[str, List[LatLng]] = {}

    def _resolve(self, file_name: str) -> Path:
        path = Path(file_name)
        return path if path.is_absolute() else self.assets_dir / path

    def load(self, file_name: str) -> List[LatLng]:
        """
        Load every valid location of an asset file.

        Args:
            file_name: File name inside the assets dir, or an absolute path

        Returns:
            Parsed locations, empty when the file cannot be read
        """
        if file_name in self._cache:
            return self._cache[file_name]

        path = self._resolve(file_name)
        try:
            with path.open(encoding="utf-8") as f:
                locations = parse_locations(f)
        except OSError as e:
            logger.warning("Could not read locations from %s: %s", path, e)
            return []

        logger.info("Loaded %d locations from %s", len(locations), path.name)
        self._cache[file_name] = locations
        return locations

    def random_locations(self, file_name: str, count: int) -> List[LatLng]:
        """Pick up to ``count`` distinct random locations from an asset."""
        pool = self.load(file_name)
        return self.rng.sample(pool, min(count, len(pool)))

    def game_locations(self, count: Optional[int] = None) -> List[LatLng]:
        settings = get_settings()
        return self.random_locations(settings.LOCATIONS_FILE, count or settings.ROUNDS_PER_GAME)

    def challenge_locations(self, count: Optional[int] = None) -> List[LatLng]:
        settings = get_settings()
        return self.random_locations(settings.CHALLENGE_LOCATIONS_FILE, count or settings.ROUNDS_PER_GAME)

    def unmastered(self, locations: Iterable[LatLng], mastered: Set[str]) -> List[LatLng]:
        """Shuffled copy of ``locations`` without the mastered keys."""
        remaining = [loc for loc in locations if loc.key not in mastered]
        self.rng.shuffle(remaining)
        return remaining
