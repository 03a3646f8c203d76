"""Shared helpers for font controllers."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from litestar import Request, Response
from litestar.datastructures import UploadFile
from litestar.exceptions import ClientException
from litestar.status_codes import HTTP_413_REQUEST_ENTITY_TOO_LARGE

from typetester.auth.csrf import verify_csrf
from typetester.auth.session import is_admin
from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.fonts.validator import UploadCandidate

if TYPE_CHECKING:
    from collections.abc import Mapping

    from typetester.runtime import FontRuntime

FONT_FILE_FIELD = "font_file"
FONT_NAME_FIELD = "font_name"


def get_runtime(request: Request) -> FontRuntime:
    return request.app.state.font_runtime


def success(data: Any, status_code: int = 200) -> Response:
    return Response(
        content={"success": True, "data": data},
        status_code=status_code,
        media_type="application/json",
    )


async def read_form(request: Request) -> Mapping[str, Any]:
    """Parse the request form; a broken upload body is a transport error."""
    try:
        return await request.form()
    except ClientException as exc:
        if exc.status_code == HTTP_413_REQUEST_ENTITY_TOO_LARGE:
            raise FontOperationError(FailureReason.TOO_LARGE) from exc
        raise FontOperationError(FailureReason.TRANSPORT_ERROR, str(exc.detail)) from exc


def require_admin(request: Request, form_data: Mapping[str, Any]) -> None:
    """Verify the authenticity token, then the admin session."""
    if not verify_csrf(request, form_data):
        raise FontOperationError(FailureReason.BAD_AUTHENTICITY_TOKEN)
    if not is_admin(request):
        raise FontOperationError(FailureReason.PERMISSION_DENIED)


def parse_font_id(raw: str) -> int:
    """Parse a path id; anything but a positive integer is invalid-id."""
    try:
        font_id = int(raw)
    except (TypeError, ValueError):
        raise FontOperationError(FailureReason.INVALID_ID) from None
    if font_id <= 0:
        raise FontOperationError(FailureReason.INVALID_ID)
    return font_id


def upload_candidate_from_form(form_data: Mapping[str, Any]) -> UploadCandidate:
    """Describe the ``font_file`` field for the validator."""
    upload = form_data.get(FONT_FILE_FIELD)
    if not isinstance(upload, UploadFile):
        return UploadCandidate(filename=None, size=0, stream=None)

    stream = upload.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)

    return UploadCandidate(
        filename=upload.filename,
        size=size,
        stream=stream,
        content_type=upload.content_type,
    )


def display_name_from_form(form_data: Mapping[str, Any]) -> str | None:
    value = form_data.get(FONT_NAME_FIELD)
    return value if isinstance(value, str) else None
