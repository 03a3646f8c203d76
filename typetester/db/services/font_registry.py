"""Font registry: durable metadata plus a read-through cache.

The database is the source of truth. Cache entries only accelerate reads;
they are invalidated after every insert and delete, and any cache failure
falls back to the database.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from typetester.db.models.font_asset import FontAsset
from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.fonts.records import FontAssetRecord
from typetester.lib.cache import CacheUnavailableError
from typetester.lib.observability import span
from typetester.lib.storage.base import RemovalResult, StorageError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from typetester.lib.cache import CacheBackend
    from typetester.lib.storage.base import FontStore, StoredFont

logger = logging.getLogger(__name__)

ALL_FONTS_KEY = "fonts:all"
DEFAULT_TTL = 3600


def font_cache_key(font_id: int) -> str:
    return f"fonts:id:{font_id}"


@dataclass(frozen=True)
class DeletionResult:
    """What happened when a font was deleted."""

    record: FontAssetRecord
    file_removed: bool


class AssetRegistry:
    """Authoritative store of font metadata."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: CacheBackend,
        store: FontStore,
        ttl: int = DEFAULT_TTL,
    ) -> None:
        self._session_factory = session_factory
        self._cache = cache
        self._store = store
        self._ttl = ttl

    @property
    def store(self) -> FontStore:
        return self._store

    async def insert(
        self,
        *,
        display_name: str,
        original_filename: str,
        stored: StoredFont,
    ) -> FontAssetRecord:
        """Write a new font row and return its record.

        Args:
            display_name: Name shown to visitors
            original_filename: Sanitized name the file was uploaded under
            stored: Location the store assigned to the file

        Returns:
            The committed record, with its id and upload time

        Raises:
            FontOperationError: ``durable-write-failed`` if the row cannot be written
        """
        with span("fonts.registry.insert", stored_filename=stored.stored_filename):
            row = FontAsset(
                display_name=display_name,
                original_filename=original_filename,
                stored_filename=stored.stored_filename,
                storage_path=stored.storage_path,
                uploaded_at=datetime.now(UTC),
            )
            try:
                async with self._session_factory() as session:
                    session.add(row)
                    await session.commit()
                    await session.refresh(row)
                    record = FontAssetRecord.from_row(row)
            except SQLAlchemyError as exc:
                logger.error("Font insert failed for %s", stored.stored_filename, exc_info=True)
                raise FontOperationError(FailureReason.DURABLE_WRITE_FAILED) from exc

            await self._cache_delete(ALL_FONTS_KEY)
            await self._cache_set(font_cache_key(record.id), record.model_dump_json())
            return record

    async def get_by_id(self, font_id: int) -> FontAssetRecord | None:
        """Return the font with *font_id*, or None. Misses are not cached.

        Args:
            font_id: Primary key of the font

        Returns:
            The font record, or None if no such font exists
        """
        key = font_cache_key(font_id)
        cached = await self._cache_get(key)
        if cached is not None:
            try:
                return FontAssetRecord.model_validate_json(cached)
            except ValidationError:
                logger.warning("Discarding malformed cache entry %s", key)

        with span("fonts.registry.get", font_id=font_id):
            async with self._session_factory() as session:
                result = await session.execute(select(FontAsset).where(FontAsset.id == font_id))
                row = result.scalar_one_or_none()
                record = FontAssetRecord.from_row(row) if row else None

        if record is not None:
            await self._cache_set(key, record.model_dump_json())
        return record

    async def list_all(self) -> list[FontAssetRecord]:
        """Return every font, newest upload first."""
        cached = await self._cache_get(ALL_FONTS_KEY)
        if cached is not None:
            try:
                return [FontAssetRecord.model_validate(item) for item in json.loads(cached)]
            except (ValueError, TypeError, ValidationError):
                logger.warning("Discarding malformed cache entry %s", ALL_FONTS_KEY)

        with span("fonts.registry.list"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(FontAsset).order_by(FontAsset.uploaded_at.desc(), FontAsset.id.desc())
                )
                records = [FontAssetRecord.from_row(row) for row in result.scalars().all()]

        payload = json.dumps([record.model_dump(mode="json") for record in records])
        await self._cache_set(ALL_FONTS_KEY, payload)
        return records

    async def delete_by_id(self, font_id: int) -> DeletionResult | None:
        """Delete the font file and its row.

        A file that cannot be removed does not keep the row alive; the
        failure is logged and reported through ``file_removed``. The font's cache
        entries are dropped even when the row cannot be deleted.

        Args:
            font_id: Primary key of the font

        Returns:
            A DeletionResult, or None if there is no such font

        Raises:
            FontOperationError: ``durable-write-failed`` if the row cannot be deleted
        """
        record = await self.get_by_id(font_id)
        if record is None:
            return None

        with span("fonts.registry.delete", font_id=font_id):
            file_removed = True
            try:
                outcome = await self._store.remove(record.storage_path)
                if outcome is RemovalResult.NOT_FOUND:
                    logger.warning("Font file for %s was already missing: %s", font_id, record.storage_path)
            except StorageError:
                file_removed = False
                logger.warning("Could not remove font file %s", record.storage_path, exc_info=True)

            try:
                async with self._session_factory() as session:
                    result = await session.execute(delete(FontAsset).where(FontAsset.id == font_id))
                    await session.commit()
                    deleted = result.rowcount
            except SQLAlchemyError as exc:
                logger.error("Font delete failed for id %s", font_id, exc_info=True)
                await self._cache_delete(font_cache_key(font_id), ALL_FONTS_KEY)
                raise FontOperationError(
                    FailureReason.DURABLE_WRITE_FAILED,
                    "Failed to delete font from database",
                ) from exc

            await self._cache_delete(font_cache_key(font_id), ALL_FONTS_KEY)

        if not deleted:
            return None
        return DeletionResult(record=record, file_removed=file_removed)

    async def flush_cache(self) -> None:
        """Drop every cache entry owned by the registry."""
        try:
            await self._cache.clear()
        except CacheUnavailableError:
            logger.warning("Cache flush failed; entries expire after %ss", self._ttl, exc_info=True)

    async def close(self) -> None:
        """Release the cache connection. The session factory is owned by the engine."""
        await self._cache.close()

    # -- cache helpers: failures degrade to the database --

    async def _cache_get(self, key: str) -> str | None:
        try:
            return await self._cache.get(key)
        except CacheUnavailableError:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

    async def _cache_set(self, key: str, value: str) -> None:
        try:
            await self._cache.set(key, value, self._ttl)
        except CacheUnavailableError:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    async def _cache_delete(self, *keys: str) -> None:
        try:
            await self._cache.delete(*keys)
        except CacheUnavailableError:
            logger.warning("Cache invalidation failed for %s", ", ".join(keys), exc_info=True)
