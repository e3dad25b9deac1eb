from typing import Callable, Dict, Optional, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..logger import get_logger
from .models import KeyValue

logger = get_logger("gateway")

T = TypeVar("T")


class PersistenceGateway(Protocol):
    """
    Durable key/value storage.

    Values are opaque bytes; callers serialize them. A missing key reads as
    ``None``, which means "nothing stored yet" rather than an error.
    """

    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def put(self, key: str, value: bytes) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class InMemoryGateway:
    """Process-local gateway, used in tests and when no database is wanted."""

    def __init__(self):
        self.data: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    async def put(self, key: str, value: bytes) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SqlGateway:
    """Gateway storing blobs in the ``key_values`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[bytes]:
        async with self.session_factory() as db:
            result = await db.execute(select(KeyValue).where(KeyValue.key == key))
            row = result.scalar_one_or_none()
            return row.value if row else None

    async def put(self, key: str, value: bytes) -> None:
        async with self.session_factory() as db:
            row = await db.get(KeyValue, key)
            if row is None:
                db.add(KeyValue(key=key, value=value))
            else:
                row.value = value
            await db.commit()

    async def delete(self, key: str) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(KeyValue).where(KeyValue.key == key))
            await db.commit()


async def read_json(
    gateway: PersistenceGateway,
    key: str,
    adapter: TypeAdapter,
    default: Callable[[], T],
) -> T:
    """
    Read and validate a JSON blob.

    Absent keys and corrupted blobs both fall back to ``default()``.
    """
    raw = await gateway.get(key)
    if raw is None:
        return default()
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("Discarding corrupted value for %s: %s", key, e.error_count())
        return default()


async def write_json(gateway: PersistenceGateway, key: str, adapter: TypeAdapter, value) -> None:
    await gateway.put(key, adapter.dump_json(value))
