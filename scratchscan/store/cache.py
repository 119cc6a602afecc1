"""SQLite key-value cache holding the last successful snapshot."""
import logging
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import aiosqlite
import orjson
from pydantic import ValidationError

from scratchscan.config import CACHE_DB, config
from scratchscan.errors import CacheError
from scratchscan.parse.models import Snapshot

logger = logging.getLogger(__name__)


class SnapshotCache:
    """get/set/remove by key, plus snapshot helpers on top."""

    def __init__(self, db_path: Path = CACHE_DB, key: Optional[str] = None):
        self.db_path = db_path
        self.key = key or config.CACHE_KEY
        self._initialized = False

    async def initialize(self) -> None:
        """Create the table if it doesn't exist."""
        if self._initialized:
            return
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv_cache (
                        key TEXT PRIMARY KEY,
                        value BLOB NOT NULL,
                        updated_at REAL NOT NULL
                    )
                    """
                )
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise CacheError(f"Cannot initialize cache at {self.db_path}: {e}") from e
        self._initialized = True
        logger.debug(f"Cache database initialized at {self.db_path}")

    async def get(self, key: str) -> Optional[bytes]:
        await self.initialize()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute("SELECT value FROM kv_cache WHERE key = ?", (key,))
                row = await cursor.fetchone()
        except (aiosqlite.Error, OSError) as e:
            raise CacheError(f"Cannot read cache key {key}: {e}") from e
        return row[0] if row else None

    async def set(self, key: str, value: bytes) -> None:
        await self.initialize()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    INSERT OR REPLACE INTO kv_cache (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    (key, value, time.time()),
                )
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise CacheError(f"Cannot write cache key {key}: {e}") from e

    async def remove(self, key: str) -> None:
        await self.initialize()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("DELETE FROM kv_cache WHERE key = ?", (key,))
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise CacheError(f"Cannot remove cache key {key}: {e}") from e

    async def save_snapshot(self, snapshot: Snapshot) -> None:
        payload = orjson.dumps(snapshot.model_dump(mode="json"))
        await self.set(self.key, payload)
        logger.info(f"Cached snapshot with {len(snapshot.records)} games")

    async def load_snapshot(self) -> Optional[Snapshot]:
        """Cached snapshot, or None. Unreadable entries are dropped."""
        payload = await self.get(self.key)
        if payload is None:
            return None
        try:
            snapshot = Snapshot.model_validate(orjson.loads(payload))
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to load cached data: {e}")
            await self.remove(self.key)
            return None
        if not snapshot.records:
            return None
        return snapshot


def is_stale(fetched_at: datetime, now: Optional[datetime] = None, max_age_hours: Optional[float] = None) -> bool:
    """True once the snapshot is older than the staleness threshold (warning only)."""
    now = now or datetime.utcnow()
    hours = config.CACHE_MAX_AGE_HOURS if max_age_hours is None else max_age_hours
    return now - fetched_at > timedelta(hours=hours)


def format_time_ago(fetched_at: datetime, now: Optional[datetime] = None) -> str:
    """'3 hours ago', '1 day ago', 'just now'."""
    now = now or datetime.utcnow()
    hours = int((now - fetched_at).total_seconds() // 3600)
    days = hours // 24
    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} ago"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return "just now"
