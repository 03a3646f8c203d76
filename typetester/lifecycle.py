"""Activation and deactivation of the font subsystem."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from typetester.db.base import Base
from typetester.db.models.font_asset import FontAsset
from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.lib.observability import span
from typetester.lib.storage.base import StorageError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from typetester.db.services.font_registry import AssetRegistry
    from typetester.lib.storage.base import FontStore

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Provision and tear down the asset directory, schema and cache.

    Both operations are idempotent. Deactivation keeps the database table so
    that reactivating restores the registry; only the files and the cache go.
    """

    def __init__(self, engine: AsyncEngine, store: FontStore, registry: AssetRegistry) -> None:
        self._engine = engine
        self._store = store
        self._registry = registry

    async def on_activate(self) -> None:
        with span("fonts.lifecycle.activate"):
            await self._store.ensure_directory()
            async with self._engine.begin() as conn:
                await conn.run_sync(_create_tables)
        logger.info("Font subsystem activated")

    async def on_deactivate(self) -> None:
        """Remove the asset directory and flush the cache namespace.

        The cache is flushed even when the directory cannot be removed.

        Raises:
            FontOperationError: ``storage-directory-error`` if the purge fails
        """
        with span("fonts.lifecycle.deactivate"):
            try:
                removed = await self._store.purge()
            except StorageError as exc:
                logger.error("Could not remove font directory: %s", exc)
                raise FontOperationError(
                    FailureReason.STORAGE_DIRECTORY_ERROR,
                    "Font directory could not be removed",
                ) from exc
            finally:
                await self._registry.flush_cache()
        logger.info("Font subsystem deactivated (directory removed: %s)", removed)


def _create_tables(sync_conn) -> None:
    Base.metadata.create_all(sync_conn, tables=[FontAsset.__table__], checkfirst=True)
