from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./unmapped.db"

    # Reverse geocoding
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODER_USER_AGENT: str = "unmapped-game/1.0"
    GEOCODER_TIMEOUT: float = 10.0
    GEOCODER_CACHE_SIZE: int = 1024

    # Game Configuration
    TIMER_DURATION_MS: int = 120_000  # 2 minutes per round
    ROUNDS_PER_GAME: int = 5
    MULTIPLAYER_ROUNDS: int = 3
    MASTERY_THRESHOLD_METERS: float = 500.0

    # Location assets (relative paths resolve against the package assets dir)
    LOCATIONS_FILE: str = "locations.txt"
    CHALLENGE_LOCATIONS_FILE: str = "challengelocations.txt"

    # Logging
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
