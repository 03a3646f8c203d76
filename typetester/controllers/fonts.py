"""Public font listing used by the preview control panel."""

from __future__ import annotations

from litestar import Controller, Request, get
from litestar.response import Response

from typetester.controllers.helpers import get_runtime, parse_font_id, success
from typetester.operations import GET_FONT, LIST_FONTS


class FontController(Controller):
    """Read-only access to the uploaded fonts."""

    path = "/fonts"

    @get("/")
    async def list_fonts(self, request: Request) -> Response:
        """List every font, newest first."""
        runtime = get_runtime(request)
        records = await runtime.operations.dispatch(LIST_FONTS)
        store = runtime.store
        return success([
            record.public_summary(store.resolve_public_url(record.stored_filename))
            for record in records
        ])

    @get("/{font_id:str}")
    async def font_detail(self, request: Request, font_id: str) -> Response:
        runtime = get_runtime(request)
        record = await runtime.operations.dispatch(GET_FONT, parse_font_id(font_id))
        return success(record.public_summary(runtime.store.resolve_public_url(record.stored_filename)))
