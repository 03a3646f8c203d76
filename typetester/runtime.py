"""Construction and shutdown of the font subsystem's collaborators."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from advanced_alchemy.config import AsyncSessionConfig, EngineConfig, SQLAlchemyAsyncConfig

from typetester.db.services.font_registry import AssetRegistry
from typetester.fonts.validator import FontValidator
from typetester.lib import observability
from typetester.lib.cache import CacheBackend, create_cache_backend
from typetester.lib.storage.obfuscating import ObfuscatingStore
from typetester.lifecycle import LifecycleManager
from typetester.operations import OperationTable, build_operations

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from typetester.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class FontRuntime:
    """Every collaborator the font operations need, wired together."""

    settings: Settings
    engine: AsyncEngine
    cache: CacheBackend
    store: ObfuscatingStore
    validator: FontValidator
    registry: AssetRegistry
    lifecycle: LifecycleManager
    operations: OperationTable = field(init=False)

    def __post_init__(self) -> None:
        self.operations = build_operations(self)

    async def shutdown(self) -> None:
        """Release the cache connection and the database engine."""
        await self.registry.close()
        await self.engine.dispose()
        logger.debug("Font runtime shut down")


def create_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    return SQLAlchemyAsyncConfig(
        connection_string=settings.db.url,
        engine_config=EngineConfig(echo=settings.db.echo),
        session_config=AsyncSessionConfig(expire_on_commit=False),
    )


async def build_runtime(
    settings: Settings,
    cache: CacheBackend | None = None,
) -> FontRuntime:
    """Create the runtime and, if configured, activate the subsystem."""
    db_config = create_db_config(settings)
    engine = db_config.get_engine()
    observability.instrument_sqlalchemy(engine)
    session_factory = db_config.create_session_maker()

    cache = cache or create_cache_backend(settings.cache)
    store = ObfuscatingStore(
        base_path=settings.fonts.asset_dir,
        public_url=settings.fonts.public_url,
        prefix=settings.fonts.filename_prefix,
        token_length=settings.fonts.token_length,
    )
    registry = AssetRegistry(session_factory, cache, store, ttl=settings.cache.ttl)

    runtime = FontRuntime(
        settings=settings,
        engine=engine,
        cache=cache,
        store=store,
        validator=FontValidator(
            max_upload_size=settings.fonts.max_upload_size,
            sniff_signatures=settings.fonts.sniff_signatures,
        ),
        registry=registry,
        lifecycle=LifecycleManager(engine, store, registry),
    )

    if settings.fonts.activate_on_startup:
        await runtime.lifecycle.on_activate()

    return runtime
