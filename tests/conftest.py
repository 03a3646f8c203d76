"""Shared pytest fixtures."""

import io

import pytest
import pytest_asyncio
import yaml

from typetester.config import (
    DatabaseConfig,
    FontsConfig,
    Settings,
    clear_settings_cache,
    set_config_path,
)
from typetester.fonts.validator import UploadCandidate
from typetester.runtime import build_runtime

# sfnt version 1.0 header followed by padding
TTF_BYTES = b"\x00\x01\x00\x00" + b"\x00" * 60
OTF_BYTES = b"OTTO" + b"\x00" * 60
WOFF_BYTES = b"wOFF" + b"\x00" * 60
WOFF2_BYTES = b"wOF2" + b"\x00" * 60
EXE_BYTES = b"MZ\x90\x00" + b"\x00" * 60

ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture
def font_bytes():
    """Minimal content for each supported container, plus a renamed executable."""
    return {"ttf": TTF_BYTES, "otf": OTF_BYTES, "woff": WOFF_BYTES, "woff2": WOFF2_BYTES, "exe": EXE_BYTES}


@pytest.fixture
def make_candidate():
    """Factory for upload candidates backed by an in-memory stream."""
    def _make(filename, data=TTF_BYTES, **kwargs):
        return UploadCandidate(filename=filename, size=len(data), stream=io.BytesIO(data), **kwargs)
    return _make


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the database and asset directory at tmp_path."""
    return Settings(
        secret_key="test-secret-key",
        admin_password=ADMIN_PASSWORD,
        debug=True,
        db=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'typetester.db'}"),
        fonts=FontsConfig(asset_dir=tmp_path / "fonts"),
    )


@pytest_asyncio.fixture
async def runtime(settings):
    """An activated font runtime with an in-memory cache."""
    runtime = await build_runtime(settings)
    yield runtime
    await runtime.shutdown()


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


@pytest.fixture
def clean_settings():
    """Reset the cached settings and config path around a test."""
    clear_settings_cache()
    set_config_path(None)
    yield
    clear_settings_cache()
    set_config_path(None)
