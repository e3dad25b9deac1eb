from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, LargeBinary
from .session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValue(Base):
    """Opaque blob stored under a string key (badge progress, players, stats)."""
    __tablename__ = "key_values"

    key = Column(String(200), primary_key=True, index=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
