from pydantic import BaseModel, ConfigDict, Field
from typing import List


class BadgeDefinition(BaseModel):
    """Static description of a badge and the progress needed to unlock it."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    required_progress: int = Field(default=1, ge=1)


class BadgeProgress(BaseModel):
    """
    Mutable progress record for one badge.

    ``streak`` holds the running streak for streak badges and ``bitmask``
    the missed-continent bits for the continent badge; other badges leave
    both at zero.
    """
    badge_id: str
    progress: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    bitmask: int = Field(default=0, ge=0)


class BadgeStatus(BaseModel):
    """Badge definition joined with its progress."""
    badge: BadgeDefinition
    progress: int
    unlocked: bool


class BadgeUpdate(BaseModel):
    """Badges that changed while processing a batch of rounds."""
    unlocked: List[BadgeStatus] = []
    progressed: List[BadgeStatus] = []


class CuratedMapStatus(BaseModel):
    """Mastery state of a curated map."""
    id: str
    name: str
    badge_id: str
    total_locations: int
    mastered_locations: int
    is_mastered: bool
