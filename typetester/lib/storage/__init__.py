"""Opaque font blob storage."""

from typetester.lib.storage.base import (
    DirectoryUnavailableError,
    FontStore,
    RemovalResult,
    StorageError,
    StoredFont,
    WriteFailedError,
)
from typetester.lib.storage.obfuscating import ObfuscatingStore

__all__ = [
    "DirectoryUnavailableError",
    "FontStore",
    "ObfuscatingStore",
    "RemovalResult",
    "StorageError",
    "StoredFont",
    "WriteFailedError",
]
