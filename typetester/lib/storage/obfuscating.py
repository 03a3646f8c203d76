"""Local filesystem store that hides uploaded filenames."""

from __future__ import annotations

import asyncio
import logging
import secrets
import shutil
import string
from pathlib import Path
from typing import BinaryIO

from typetester.lib.storage.base import (
    DirectoryUnavailableError,
    RemovalResult,
    StorageError,
    StoredFont,
    WriteFailedError,
)

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits

# Attempts at finding an unused name before giving up
_MAX_NAME_ATTEMPTS = 8


def generate_token(length: int) -> str:
    """Return a random alphanumeric token."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


class ObfuscatingStore:
    """Store font files under random names inside a single directory.

    Stored names look like ``font_Ab3dE9xYz01Q.woff2``; nothing about the
    uploaded filename reaches the filesystem.
    """

    def __init__(
        self,
        base_path: Path,
        public_url: str,
        prefix: str = "font",
        token_length: int = 12,
    ) -> None:
        if token_length < 12:
            raise ValueError("token_length must be at least 12")
        self._base_path = Path(base_path).resolve()
        self._public_url = public_url.rstrip("/")
        self._prefix = prefix
        self._token_length = token_length

    @property
    def base_path(self) -> Path:
        return self._base_path

    def generate_filename(self, extension: str) -> str:
        return f"{self._prefix}_{generate_token(self._token_length)}.{extension}"

    async def store(self, extension: str, source: BinaryIO) -> StoredFont:
        """Copy *source* to a new, randomly named file.

        The file is created exclusively, so an existing font is never
        overwritten.

        Args:
            extension: Lowercase extension without the dot, e.g. ``"woff2"``
            source: Readable binary stream; it is rewound before copying

        Returns:
            The stored filename and its absolute storage path

        Raises:
            DirectoryUnavailableError: If the asset directory cannot be created
            WriteFailedError: If the file cannot be written
        """
        await self.ensure_directory()
        return await asyncio.to_thread(self._write, extension, source)

    async def remove(self, storage_path: str) -> RemovalResult:
        """Delete a stored file.

        Args:
            storage_path: Path previously returned by ``store``

        Returns:
            REMOVED, or NOT_FOUND if the file was already gone

        Raises:
            StorageError: If the path is outside the asset directory or unlink fails
        """
        path = self._contained_path(Path(storage_path))
        return await asyncio.to_thread(self._unlink, path)

    def resolve_public_url(self, stored_filename: str) -> str:
        return f"{self._public_url}/{stored_filename}"

    async def read_bytes(self, stored_filename: str) -> bytes:
        """Return the content of a stored font."""
        path = self._contained_path(self._base_path / stored_filename)
        return await asyncio.to_thread(path.read_bytes)

    async def ensure_directory(self) -> None:
        try:
            await asyncio.to_thread(self._base_path.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryUnavailableError(
                f"Cannot create font directory {self._base_path}: {exc}"
            ) from exc

    async def purge(self) -> bool:
        """Remove the asset directory and everything in it.

        Returns:
            True if a directory was removed, False if there was none
        """
        return await asyncio.to_thread(self._rmtree)

    # -- internal helpers --

    def _contained_path(self, path: Path) -> Path:
        """Resolve *path* and refuse anything outside the asset directory."""
        resolved = path.resolve()
        if resolved.parent != self._base_path:
            raise StorageError(f"Refusing to touch {path}: outside {self._base_path}")
        return resolved

    def _write(self, extension: str, source: BinaryIO) -> StoredFont:
        for _ in range(_MAX_NAME_ATTEMPTS):
            stored_filename = self.generate_filename(extension)
            path = self._base_path / stored_filename
            try:
                target = open(path, "xb")
            except FileExistsError:
                continue
            except OSError as exc:
                raise WriteFailedError(f"Cannot open {path}: {exc}") from exc

            try:
                with target:
                    source.seek(0)
                    shutil.copyfileobj(source, target)
            except OSError as exc:
                path.unlink(missing_ok=True)
                raise WriteFailedError(f"Cannot write {path}: {exc}") from exc

            return StoredFont(stored_filename=stored_filename, storage_path=str(path))

        raise WriteFailedError("Could not find an unused stored filename")

    @staticmethod
    def _unlink(path: Path) -> RemovalResult:
        try:
            path.unlink()
        except FileNotFoundError:
            return RemovalResult.NOT_FOUND
        except OSError as exc:
            raise StorageError(f"Cannot remove {path}: {exc}") from exc
        return RemovalResult.REMOVED

    def _rmtree(self) -> bool:
        if not self._base_path.exists():
            return False
        try:
            shutil.rmtree(self._base_path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Cannot remove {self._base_path}: {exc}") from exc
        logger.info("Removed font directory %s", self._base_path)
        return True
