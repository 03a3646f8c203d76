"""Tests for the upload, delete and lookup operations."""

import io
import re
from unittest.mock import AsyncMock

import pytest

from typetester.db.services import font_service
from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.fonts.validator import UploadCandidate
from typetester.lib.storage import DirectoryUnavailableError, WriteFailedError


def _stored_files(runtime):
    return sorted(p.name for p in runtime.store.base_path.iterdir())


async def _upload(runtime, candidate, display_name=None):
    return await font_service.upload_font(
        runtime.registry, runtime.validator, candidate, display_name
    )


class TestUploadFont:
    @pytest.mark.asyncio
    async def test_upload_comic(self, runtime, make_candidate, font_bytes):
        record = await _upload(runtime, make_candidate("Comic.ttf"))

        assert record.display_name == "Comic"
        assert record.original_filename == "Comic.ttf"
        assert re.match(r"^font_[A-Za-z0-9]{12}\.ttf$", record.stored_filename)
        assert "Comic" not in record.stored_filename
        assert await runtime.store.read_bytes(record.stored_filename) == font_bytes["ttf"]
        assert runtime.store.resolve_public_url(record.stored_filename) == f"/font-files/{record.stored_filename}"

    @pytest.mark.asyncio
    async def test_display_name_is_sanitized(self, runtime, make_candidate):
        record = await _upload(runtime, make_candidate("Comic.ttf"), "  Comic \n Sans ")
        assert record.display_name == "Comic Sans"

    @pytest.mark.asyncio
    async def test_blank_display_name_falls_back_to_stem(self, runtime, make_candidate):
        record = await _upload(runtime, make_candidate("Comic Sans.ttf"), "   ")
        assert record.display_name == "Comic-Sans"
        assert record.original_filename == "Comic-Sans.ttf"

    @pytest.mark.asyncio
    async def test_same_name_twice_gives_two_fonts(self, runtime, make_candidate):
        first = await _upload(runtime, make_candidate("Comic.ttf"))
        second = await _upload(runtime, make_candidate("Comic.ttf"))

        assert first.id != second.id
        assert first.stored_filename != second.stored_filename
        assert len(await runtime.registry.list_all()) == 2
        assert len(_stored_files(runtime)) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filename,data_key,reason",
        [
            ("evil.ttf", "exe", FailureReason.INVALID_SIGNATURE),
            ("evil.exe", "ttf", FailureReason.INVALID_EXTENSION),
            ("$$$", "ttf", FailureReason.EMPTY_FILENAME),
        ],
    )
    async def test_rejections_leave_no_trace(self, runtime, make_candidate, font_bytes, filename, data_key, reason):
        with pytest.raises(FontOperationError) as exc_info:
            await _upload(runtime, make_candidate(filename, font_bytes[data_key]))

        assert exc_info.value.reason is reason
        assert _stored_files(runtime) == []
        assert await runtime.registry.list_all() == []

    @pytest.mark.asyncio
    async def test_oversized_upload(self, runtime, font_bytes):
        candidate = UploadCandidate(filename="big.ttf", size=11 * 1024 * 1024, stream=io.BytesIO(font_bytes["ttf"]))

        with pytest.raises(FontOperationError) as exc_info:
            await _upload(runtime, candidate)

        assert exc_info.value.reason is FailureReason.TOO_LARGE

    @pytest.mark.asyncio
    async def test_failed_insert_removes_stored_file(self, runtime, make_candidate, monkeypatch):
        monkeypatch.setattr(
            runtime.registry,
            "insert",
            AsyncMock(side_effect=FontOperationError(FailureReason.DURABLE_WRITE_FAILED)),
        )

        with pytest.raises(FontOperationError) as exc_info:
            await _upload(runtime, make_candidate("Comic.ttf"))

        assert exc_info.value.reason is FailureReason.DURABLE_WRITE_FAILED
        assert _stored_files(runtime) == []

    @pytest.mark.asyncio
    async def test_write_failure_is_move_failed(self, runtime, make_candidate, monkeypatch):
        monkeypatch.setattr(runtime.store, "store", AsyncMock(side_effect=WriteFailedError("disk full")))

        with pytest.raises(FontOperationError) as exc_info:
            await _upload(runtime, make_candidate("Comic.ttf"))

        assert exc_info.value.reason is FailureReason.MOVE_FAILED
        assert await runtime.registry.list_all() == []

    @pytest.mark.asyncio
    async def test_directory_failure(self, runtime, make_candidate, monkeypatch):
        monkeypatch.setattr(runtime.store, "store", AsyncMock(side_effect=DirectoryUnavailableError("ro")))

        with pytest.raises(FontOperationError) as exc_info:
            await _upload(runtime, make_candidate("Comic.ttf"))

        assert exc_info.value.reason is FailureReason.STORAGE_DIRECTORY_ERROR


class TestDeleteFont:
    @pytest.mark.asyncio
    async def test_delete(self, runtime, make_candidate):
        record = await _upload(runtime, make_candidate("Comic.ttf"))

        result = await font_service.delete_font(runtime.registry, record.id)

        assert result.file_removed is True
        assert result.record == record
        assert _stored_files(runtime) == []

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, runtime):
        with pytest.raises(FontOperationError) as exc_info:
            await font_service.delete_font(runtime.registry, 99999)
        assert exc_info.value.reason is FailureReason.NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize("font_id", [0, -3])
    async def test_delete_invalid_id(self, runtime, font_id):
        with pytest.raises(FontOperationError) as exc_info:
            await font_service.delete_font(runtime.registry, font_id)
        assert exc_info.value.reason is FailureReason.INVALID_ID

    @pytest.mark.asyncio
    async def test_deleted_font_is_gone(self, runtime, make_candidate):
        record = await _upload(runtime, make_candidate("Comic.ttf"))
        await font_service.delete_font(runtime.registry, record.id)

        with pytest.raises(FontOperationError) as exc_info:
            await font_service.get_font(runtime.registry, record.id)
        assert exc_info.value.reason is FailureReason.NOT_FOUND


class TestGetFont:
    @pytest.mark.asyncio
    async def test_get_font(self, runtime, make_candidate):
        record = await _upload(runtime, make_candidate("Comic.ttf"))
        assert await font_service.get_font(runtime.registry, record.id) == record

    @pytest.mark.asyncio
    async def test_get_invalid_id(self, runtime):
        with pytest.raises(FontOperationError) as exc_info:
            await font_service.get_font(runtime.registry, 0)
        assert exc_info.value.reason is FailureReason.INVALID_ID
