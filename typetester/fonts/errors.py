"""Failure reasons reported to callers of the font operations."""

from __future__ import annotations

from enum import Enum


class FailureReason(str, Enum):
    """Caller-visible reason codes for rejected or failed operations."""

    # Input validation
    NO_FILE = "no-file"
    TRANSPORT_ERROR = "transport-error"
    TOO_LARGE = "too-large"
    EMPTY_FILENAME = "empty-filename"
    INVALID_EXTENSION = "invalid-extension"
    INVALID_SIGNATURE = "invalid-signature"
    INVALID_ID = "invalid-id"
    NOT_FOUND = "not-found"

    # Authorization
    PERMISSION_DENIED = "permission-denied"
    BAD_AUTHENTICITY_TOKEN = "bad-authenticity-token"

    # Storage / durable store
    STORAGE_DIRECTORY_ERROR = "storage-directory-error"
    MOVE_FAILED = "move-failed"
    DURABLE_WRITE_FAILED = "durable-write-failed"


MESSAGES: dict[FailureReason, str] = {
    FailureReason.NO_FILE: "No file uploaded",
    FailureReason.TRANSPORT_ERROR: "File upload error",
    FailureReason.TOO_LARGE: "File exceeds the maximum upload size",
    FailureReason.EMPTY_FILENAME: "File name is empty",
    FailureReason.INVALID_EXTENSION: "Invalid file type. Please upload TTF, OTF, WOFF, or WOFF2 files.",
    FailureReason.INVALID_SIGNATURE: "File content does not match its font format",
    FailureReason.INVALID_ID: "Invalid font ID",
    FailureReason.NOT_FOUND: "Font not found",
    FailureReason.PERMISSION_DENIED: "Insufficient permissions",
    FailureReason.BAD_AUTHENTICITY_TOKEN: "Invalid or missing authenticity token",
    FailureReason.STORAGE_DIRECTORY_ERROR: "Font directory could not be created",
    FailureReason.MOVE_FAILED: "Failed to move uploaded file",
    FailureReason.DURABLE_WRITE_FAILED: "Failed to save font information to database",
}


class FontOperationError(Exception):
    """Raised when an upload, delete or lookup cannot complete."""

    def __init__(self, reason: FailureReason, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail or MESSAGES[reason]
        super().__init__(f"{reason.value}: {self.detail}")
