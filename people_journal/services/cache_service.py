import hashlib
import json
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utc_now_iso
from ..models.cache import CacheRecord
from ..utils.logging import get_logger

logger = get_logger(__name__)

EXTRACT_CATEGORY = "extract"
PREP_CATEGORY = "prep"


def cache_key(*parts: str) -> str:
    """SHA-256 over the parts, each followed by a NUL separator"""
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()


class CacheService:
    """Key/category/value memoization table for AI results"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str, category: str) -> Optional[str]:
        stmt = select(CacheRecord.value).where(
            CacheRecord.key == key,
            CacheRecord.category == category
        )
        return await self.db.scalar(stmt)

    async def get_json(self, key: str, category: str) -> Optional[Any]:
        """Decoded cached value, or None on a miss.

        A value that is not valid JSON is logged, deleted and reported as a
        miss so the next write replaces it.
        """
        raw = await self.get(key, category)
        if raw is None:
            logger.debug(f"Cache miss ({category}) {key[:12]}")
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Dropping corrupt {category} cache entry {key[:12]}: {e}")
            await self.invalidate(key, category)
            return None

    async def set(self, key: str, category: str, value: str) -> None:
        await self.db.merge(CacheRecord(
            key=key,
            category=category,
            value=value,
            created_at=utc_now_iso()
        ))
        await self.db.commit()

    async def invalidate(self, key: str, category: str) -> None:
        await self.db.execute(
            delete(CacheRecord).where(
                CacheRecord.key == key,
                CacheRecord.category == category
            )
        )
        await self.db.commit()
