"""Font upload and delete operations.

Glue between the validator, the obfuscating store and the registry. Every
failure surfaces as a ``FontOperationError`` with a reason code.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.fonts.validator import sanitize_text
from typetester.lib.storage.base import (
    DirectoryUnavailableError,
    StorageError,
    WriteFailedError,
)

if TYPE_CHECKING:
    from typetester.db.services.font_registry import AssetRegistry, DeletionResult
    from typetester.fonts.records import FontAssetRecord
    from typetester.fonts.validator import FontValidator, UploadCandidate

logger = logging.getLogger(__name__)


async def upload_font(
    registry: AssetRegistry,
    validator: FontValidator,
    candidate: UploadCandidate,
    display_name: str | None = None,
) -> FontAssetRecord:
    """Validate, store and register an uploaded font.

    If the database write fails, the file that was just stored is removed
    again before the error propagates.

    Args:
        registry: Registry that owns the font rows and the store
        validator: Validator applied before anything touches the disk
        candidate: The uploaded file
        display_name: Optional name shown to visitors; defaults to the file stem

    Returns:
        The committed font record
    """
    decision = validator.validate(candidate)
    if not decision.accepted:
        logger.info("Rejected font upload %r: %s", candidate.filename, decision.reason.value)
        raise FontOperationError(decision.reason)

    name = sanitize_text(display_name or "") or decision.stem

    store = registry.store
    try:
        stored = await store.store(decision.extension, candidate.stream)
    except DirectoryUnavailableError as exc:
        logger.error("Font directory unavailable: %s", exc)
        raise FontOperationError(FailureReason.STORAGE_DIRECTORY_ERROR) from exc
    except WriteFailedError as exc:
        logger.error("Storing font failed: %s", exc)
        raise FontOperationError(FailureReason.MOVE_FAILED) from exc

    try:
        record = await registry.insert(
            display_name=name,
            original_filename=decision.filename,
            stored=stored,
        )
    except FontOperationError:
        try:
            await store.remove(stored.storage_path)
        except StorageError:
            logger.error("Orphaned font file left at %s", stored.storage_path, exc_info=True)
        raise

    logger.info("Uploaded font %s as %s (id %s)", decision.filename, stored.stored_filename, record.id)
    return record


async def delete_font(registry: AssetRegistry, font_id: int) -> DeletionResult:
    """Delete a font and its stored file."""
    if font_id <= 0:
        raise FontOperationError(FailureReason.INVALID_ID)

    result = await registry.delete_by_id(font_id)
    if result is None:
        raise FontOperationError(FailureReason.NOT_FOUND)

    logger.info("Deleted font %s (file removed: %s)", font_id, result.file_removed)
    return result


async def get_font(registry: AssetRegistry, font_id: int) -> FontAssetRecord:
    """Return a single font or raise not-found."""
    if font_id <= 0:
        raise FontOperationError(FailureReason.INVALID_ID)
    record = await registry.get_by_id(font_id)
    if record is None:
        raise FontOperationError(FailureReason.NOT_FOUND)
    return record
