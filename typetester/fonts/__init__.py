"""Font upload validation, reason codes and records."""

from typetester.fonts.errors import FailureReason, FontOperationError
from typetester.fonts.records import FontAssetRecord
from typetester.fonts.validator import FontValidator, UploadCandidate, ValidationResult

__all__ = [
    "FailureReason",
    "FontAssetRecord",
    "FontOperationError",
    "FontValidator",
    "UploadCandidate",
    "ValidationResult",
]
