"""Tests for the obfuscating font store."""

import io
import re

import pytest

from typetester.lib.storage import (
    DirectoryUnavailableError,
    FontStore,
    ObfuscatingStore,
    RemovalResult,
    StorageError,
)

STORED_NAME = re.compile(r"^font_[A-Za-z0-9]{12}\.ttf$")


@pytest.fixture
def store(tmp_path):
    return ObfuscatingStore(base_path=tmp_path / "fonts", public_url="/font-files/")


class TestObfuscatingStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, FontStore)

    def test_short_tokens_are_refused(self, tmp_path):
        with pytest.raises(ValueError):
            ObfuscatingStore(base_path=tmp_path, public_url="/f", token_length=8)

    def test_generated_names_hide_the_upload_name(self, store):
        assert STORED_NAME.match(store.generate_filename("ttf"))

    def test_resolve_public_url(self, store):
        assert store.resolve_public_url("font_abc.ttf") == "/font-files/font_abc.ttf"

    @pytest.mark.asyncio
    async def test_store_round_trip(self, store, font_bytes):
        source = io.BytesIO(font_bytes["ttf"])
        source.read(2)

        stored = await store.store("ttf", source)

        assert STORED_NAME.match(stored.stored_filename)
        assert stored.storage_path == str(store.base_path / stored.stored_filename)
        assert await store.read_bytes(stored.stored_filename) == font_bytes["ttf"]

    @pytest.mark.asyncio
    async def test_store_creates_directory(self, store, font_bytes):
        assert not store.base_path.exists()
        await store.store("ttf", io.BytesIO(font_bytes["ttf"]))
        assert store.base_path.is_dir()

    @pytest.mark.asyncio
    async def test_names_are_unique(self, store, font_bytes):
        names = set()
        for _ in range(20):
            stored = await store.store("ttf", io.BytesIO(font_bytes["ttf"]))
            names.add(stored.stored_filename)
        assert len(names) == 20

    @pytest.mark.asyncio
    async def test_existing_name_is_never_overwritten(self, store, font_bytes):
        await store.ensure_directory()
        taken = store.base_path / "font_AAAAAAAAAAAA.ttf"
        taken.write_bytes(b"original")
        names = iter(["font_AAAAAAAAAAAA.ttf", "font_BBBBBBBBBBBB.ttf"])
        store.generate_filename = lambda extension: next(names)

        stored = await store.store("ttf", io.BytesIO(font_bytes["ttf"]))

        assert stored.stored_filename == "font_BBBBBBBBBBBB.ttf"
        assert taken.read_bytes() == b"original"

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, store, font_bytes):
        stored = await store.store("ttf", io.BytesIO(font_bytes["ttf"]))

        assert await store.remove(stored.storage_path) is RemovalResult.REMOVED
        assert await store.remove(stored.storage_path) is RemovalResult.NOT_FOUND

    @pytest.mark.asyncio
    async def test_remove_refuses_paths_outside_directory(self, store, tmp_path):
        await store.ensure_directory()
        outside = tmp_path / "other.ttf"
        outside.write_bytes(b"keep me")

        with pytest.raises(StorageError):
            await store.remove(str(outside))
        with pytest.raises(StorageError):
            await store.remove(str(store.base_path / ".." / "other.ttf"))
        assert outside.exists()

    @pytest.mark.asyncio
    async def test_unusable_directory(self, tmp_path, font_bytes):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = ObfuscatingStore(base_path=blocker / "fonts", public_url="/f")

        with pytest.raises(DirectoryUnavailableError):
            await store.store("ttf", io.BytesIO(font_bytes["ttf"]))

    @pytest.mark.asyncio
    async def test_purge(self, store, font_bytes):
        await store.store("ttf", io.BytesIO(font_bytes["ttf"]))

        assert await store.purge() is True
        assert not store.base_path.exists()
        assert await store.purge() is False
