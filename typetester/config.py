import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early so env vars are available for YAML interpolation
_env_file = Path.cwd() / ".env"
load_dotenv(_env_file)

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

CONFIG_PATH_ENV_VAR = "TYPETESTER_CONFIG"

MEBIBYTE = 1024 * 1024

_config_path_override: Path | None = None


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def set_config_path(path: Path | str | None) -> None:
    """Override the config file location (used by the CLI ``--config`` option)."""
    global _config_path_override
    _config_path_override = Path(path) if path is not None else None


def get_config_path() -> Path:
    """Resolve the app.yaml location: override, then $TYPETESTER_CONFIG, then cwd."""
    if _config_path_override is not None:
        return _config_path_override
    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./typetester.db"
    echo: bool = False


class FontsConfig(BaseModel):
    """Font asset storage and upload limits."""

    asset_dir: Path = Path("uploads/font-tester")
    public_url: str = "/font-files"
    max_upload_size: int = Field(default=10 * MEBIBYTE, gt=0)
    filename_prefix: str = Field(default="font", pattern=r"^[A-Za-z0-9-]+$")
    token_length: int = Field(default=12, ge=12, le=64)
    sniff_signatures: bool = True
    activate_on_startup: bool = True

    def serves_files(self) -> bool:
        """True when public_url is a local path the app should serve itself."""
        return self.public_url.startswith("/")


class CacheConfig(BaseModel):
    """Key-value cache configuration."""

    backend: str = "memory"
    url: str = "redis://localhost:6379/0"
    namespace: str = "font_tester"
    ttl: int = Field(default=3600, gt=0)


class LogfireConfig(BaseModel):
    """Pydantic Logfire observability configuration."""

    enabled: bool = False
    service_name: str = "typetester"
    environment: str | None = None
    sample_rate: float = 1.0
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    debug: bool = False
    secret_key: str
    admin_password: str | None = None
    log_level: str = "info"

    # Sections (loaded from app.yaml)
    db: DatabaseConfig = DatabaseConfig()
    fonts: FontsConfig = FontsConfig()
    cache: CacheConfig = CacheConfig()
    logfire: LogfireConfig = LogfireConfig()


_SECTIONS: dict[str, type[BaseModel]] = {
    "db": DatabaseConfig,
    "fonts": FontsConfig,
    "cache": CacheConfig,
    "logfire": LogfireConfig,
}

_TOP_LEVEL_KEYS = ("debug", "admin_password", "log_level")


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    # First create base settings from .env
    base_settings = Settings()

    # Load app.yaml config
    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    # Merge YAML config with settings
    updates = {}

    for name, model in _SECTIONS.items():
        if name in app_config:
            updates[name] = model(**(app_config[name] or {}))

    for key in _TOP_LEVEL_KEYS:
        if key in app_config:
            updates[key] = app_config[key]

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings


def clear_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads .env and app.yaml."""
    get_settings.cache_clear()
