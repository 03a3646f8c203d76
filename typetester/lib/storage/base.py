"""Font store protocol and common types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Protocol, runtime_checkable


class StorageError(Exception):
    """Raised when the asset directory cannot be used."""


class DirectoryUnavailableError(StorageError):
    """The asset directory could not be created."""


class WriteFailedError(StorageError):
    """Copying upload bytes into the asset directory failed."""


class RemovalResult(str, Enum):
    REMOVED = "removed"
    NOT_FOUND = "not-found"


@dataclass(frozen=True)
class StoredFont:
    """Location of a font written by a store."""

    stored_filename: str
    storage_path: str


@runtime_checkable
class FontStore(Protocol):
    """Interface for opaque font blob storage."""

    async def store(self, extension: str, source: BinaryIO) -> StoredFont:
        """Persist the bytes of *source* under a freshly generated name."""
        ...

    async def remove(self, storage_path: str) -> RemovalResult:
        """Delete a stored file. Missing files are not an error."""
        ...

    def resolve_public_url(self, stored_filename: str) -> str:
        """Return the public URL for a stored file."""
        ...

    async def read_bytes(self, stored_filename: str) -> bytes:
        """Return the stored bytes."""
        ...

    async def ensure_directory(self) -> None:
        """Create the asset directory if it does not exist."""
        ...

    async def purge(self) -> bool:
        """Remove the whole asset directory. Returns False if it was absent."""
        ...
