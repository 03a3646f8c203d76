"""Upload validation for font files.

Checks run in a fixed order and stop at the first failure:

1. a file was attached and the upload transport reported no error
2. the declared size is within the configured limit
3. the sanitized filename is not empty
4. the extension is one of ttf, otf, woff, woff2
5. (optional) the first four bytes match the container signature

Only the first bytes of the temporary upload are read. Nothing is written.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import BinaryIO

from typetester.fonts.errors import FailureReason

ALLOWED_EXTENSIONS = frozenset({"ttf", "otf", "woff", "woff2"})

SIGNATURE_LENGTH = 4

# Container signatures that must match exactly for the given extension
STRICT_SIGNATURES: dict[str, frozenset[bytes]] = {
    "otf": frozenset({b"OTTO"}),
    "woff": frozenset({b"wOFF"}),
    "woff2": frozenset({b"wOF2"}),
}

# TTF files have several valid headers (sfnt version 1.0, Apple "true",
# PostScript "typ1", collections "ttcf"); they are not enumerated. Content
# that is positively some other format is still refused.
FOREIGN_SIGNATURES: tuple[bytes, ...] = (
    b"wOFF",
    b"wOF2",
    b"MZ",  # Windows executables
    b"\x7fELF",
    b"\xca\xfe\xba\xbe",  # Mach-O fat / Java class
    b"\xcf\xfa\xed\xfe",
    b"#!",
    b"PK\x03\x04",
    b"Rar!",
    b"7z\xbc\xaf",
    b"\x1f\x8b",
    b"%PDF",
    b"\x89PNG",
    b"GIF8",
    b"\xff\xd8\xff",
    b"<?",
    b"<!",
    b"<htm",
    b"<HTM",
    b"<svg",
)

# Characters stripped from filenames in addition to control characters
_SPECIAL_CHARS = re.compile(r"[?\[\]/\\=<>:;,'\"&$#*()|~`!{}%+\x00]")
_WHITESPACE = re.compile(r"\s+")
_EDGE_CHARS = ".-_"


def sanitize_filename(filename: str) -> str:
    """Reduce a caller-supplied filename to a safe display form.

    Keeps only the last path component, drops control and special
    characters and collapses whitespace runs to a single dash.
    """
    name = re.split(r"[/\\]", filename)[-1]
    name = "".join(ch for ch in name if unicodedata.category(ch) not in ("Cc", "Cf"))
    name = _SPECIAL_CHARS.sub("", name)
    name = _WHITESPACE.sub("-", name.strip())
    return name.strip(_EDGE_CHARS)


def sanitize_text(value: str) -> str:
    """Normalize a free-text field: no control characters, single spaces."""
    value = "".join(ch for ch in value if unicodedata.category(ch) not in ("Cc", "Cf"))
    return _WHITESPACE.sub(" ", value).strip()


@dataclass(frozen=True)
class UploadCandidate:
    """What the host's upload layer knows about an incoming file."""

    filename: str | None
    size: int
    stream: BinaryIO | None
    content_type: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating an upload."""

    reason: FailureReason | None = None
    filename: str = ""
    extension: str = ""

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @property
    def stem(self) -> str:
        """Filename without its extension."""
        return PurePosixPath(self.filename).stem

    @classmethod
    def reject(cls, reason: FailureReason) -> ValidationResult:
        return cls(reason=reason)


class FontValidator:
    """Accept or reject font uploads before any storage action."""

    def __init__(self, max_upload_size: int, sniff_signatures: bool = True) -> None:
        self.max_upload_size = max_upload_size
        self.sniff_signatures = sniff_signatures

    def validate(self, candidate: UploadCandidate) -> ValidationResult:
        if candidate.stream is None or not candidate.filename:
            return ValidationResult.reject(FailureReason.NO_FILE)
        if candidate.error:
            return ValidationResult.reject(FailureReason.TRANSPORT_ERROR)

        if candidate.size > self.max_upload_size:
            return ValidationResult.reject(FailureReason.TOO_LARGE)

        filename = sanitize_filename(candidate.filename)
        if not filename:
            return ValidationResult.reject(FailureReason.EMPTY_FILENAME)

        suffix = PurePosixPath(filename).suffix
        extension = suffix[1:].lower() if suffix else ""
        if extension not in ALLOWED_EXTENSIONS:
            return ValidationResult.reject(FailureReason.INVALID_EXTENSION)

        if self.sniff_signatures and not self._signature_matches(extension, candidate.stream):
            return ValidationResult.reject(FailureReason.INVALID_SIGNATURE)

        return ValidationResult(filename=filename, extension=extension)

    @staticmethod
    def _signature_matches(extension: str, stream: BinaryIO) -> bool:
        head = stream.read(SIGNATURE_LENGTH)
        stream.seek(0)

        if len(head) < SIGNATURE_LENGTH:
            return False

        expected = STRICT_SIGNATURES.get(extension)
        if expected is not None:
            return head in expected

        return not head.startswith(FOREIGN_SIGNATURES)
