"""Shared configuration helpers for ASGI app creation."""

from __future__ import annotations

import hashlib
from typing import Any

from litestar.exceptions import HTTPException
from litestar.middleware.session.client_side import CookieBackendConfig
from litestar.static_files import create_static_files_router

from typetester.config import FontsConfig
from typetester.fonts.errors import FontOperationError
from typetester.lib.exceptions import (
    font_operation_error_handler,
    http_exception_handler,
    internal_server_error_handler,
)

# Shared exception handlers dict
EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    FontOperationError: font_operation_error_handler,
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}

# Room for multipart framing around the largest accepted font
MULTIPART_OVERHEAD = 1024 * 1024


def create_session_config(
    secret_key: str,
    max_age: int = 86400,
    secure: bool = False,
    cookie_name: str = "typetester_session",
) -> CookieBackendConfig:
    """Create a cookie-backed session config."""
    # Hash the secret key to ensure it's exactly 32 bytes (256-bit)
    session_secret = hashlib.sha256(secret_key.encode()).digest()
    return CookieBackendConfig(
        secret=session_secret,
        key=cookie_name,
        max_age=max_age,
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def create_font_files_router(config: FontsConfig):
    """Serve stored fonts from ``public_url``, or None when an external host serves them."""
    if not config.serves_files():
        return None
    return create_static_files_router(
        path=config.public_url,
        directories=[config.asset_dir],
        send_as_attachment=False,
        include_in_schema=False,
    )


def max_request_body_size(config: FontsConfig) -> int:
    return config.max_upload_size * 2 + MULTIPART_OVERHEAD
