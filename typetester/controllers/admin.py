"""Font management endpoints for administrators."""

from __future__ import annotations

from litestar import Controller, Request, get, post
from litestar.response import Response
from litestar.status_codes import HTTP_201_CREATED

from typetester.auth.session import is_admin
from typetester.controllers.helpers import (
    display_name_from_form,
    get_runtime,
    parse_font_id,
    read_form,
    require_admin,
    success,
    upload_candidate_from_form,
)
from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.operations import DELETE_FONT, LIST_FONTS, UPLOAD_FONT


class FontAdminController(Controller):
    """Upload, list and delete fonts."""

    path = "/admin/fonts"

    @get("/")
    async def manage_fonts(self, request: Request) -> Response:
        """Full records, including the original filenames."""
        if not is_admin(request):
            raise FontOperationError(FailureReason.PERMISSION_DENIED)

        runtime = get_runtime(request)
        records = await runtime.operations.dispatch(LIST_FONTS)
        return success([
            record.upload_summary(runtime.store.resolve_public_url(record.stored_filename))
            for record in records
        ])

    @post("/")
    async def upload_font(self, request: Request) -> Response:
        """Accept a multipart ``font_file`` with an optional ``font_name``."""
        form_data = await read_form(request)
        require_admin(request, form_data)

        runtime = get_runtime(request)
        record = await runtime.operations.dispatch(
            UPLOAD_FONT,
            upload_candidate_from_form(form_data),
            display_name_from_form(form_data),
        )
        url = runtime.store.resolve_public_url(record.stored_filename)
        return success(record.upload_summary(url), status_code=HTTP_201_CREATED)

    @post("/{font_id:str}/delete", status_code=200)
    async def delete_font(self, request: Request, font_id: str) -> Response:
        form_data = await read_form(request)
        require_admin(request, form_data)

        runtime = get_runtime(request)
        result = await runtime.operations.dispatch(DELETE_FONT, parse_font_id(font_id))
        return success({"id": result.record.id, "fileRemoved": result.file_removed})
