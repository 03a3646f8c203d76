"""Exception handlers producing the JSON envelope used by every endpoint."""

from __future__ import annotations

import logging

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from typetester.fonts.errors import FailureReason, FontOperationError

logger = logging.getLogger(__name__)

STATUS_BY_REASON: dict[FailureReason, int] = {
    FailureReason.NO_FILE: HTTP_400_BAD_REQUEST,
    FailureReason.TRANSPORT_ERROR: HTTP_400_BAD_REQUEST,
    FailureReason.TOO_LARGE: HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    FailureReason.EMPTY_FILENAME: HTTP_400_BAD_REQUEST,
    FailureReason.INVALID_EXTENSION: HTTP_400_BAD_REQUEST,
    FailureReason.INVALID_SIGNATURE: HTTP_400_BAD_REQUEST,
    FailureReason.INVALID_ID: HTTP_400_BAD_REQUEST,
    FailureReason.NOT_FOUND: HTTP_404_NOT_FOUND,
    FailureReason.PERMISSION_DENIED: HTTP_403_FORBIDDEN,
    FailureReason.BAD_AUTHENTICITY_TOKEN: HTTP_403_FORBIDDEN,
    FailureReason.STORAGE_DIRECTORY_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    FailureReason.MOVE_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    FailureReason.DURABLE_WRITE_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
}

# Framework-level HTTP errors that correspond to a reason code
REASON_BY_STATUS: dict[int, FailureReason] = {
    HTTP_403_FORBIDDEN: FailureReason.PERMISSION_DENIED,
    HTTP_404_NOT_FOUND: FailureReason.NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE: FailureReason.TOO_LARGE,
}


def error_response(status_code: int, detail: str, reason: FailureReason | None = None) -> Response:
    return Response(
        content={
            "success": False,
            "reason": reason.value if reason else None,
            "detail": detail,
        },
        status_code=status_code,
        media_type="application/json",
    )


def font_operation_error_handler(request: Request, exc: FontOperationError) -> Response:
    """Report a failed font operation with its reason code."""
    return error_response(STATUS_BY_REASON[exc.reason], exc.detail, exc.reason)


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Wrap framework HTTP errors in the same envelope."""
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(status_code, detail, REASON_BY_STATUS.get(status_code))


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected exceptions without leaking internals."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
