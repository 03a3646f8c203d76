"""Typed, cacheable projection of a stored font."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from typetester.db.models.font_asset import FontAsset


class FontAssetRecord(BaseModel):
    """Immutable metadata for one uploaded font."""

    model_config = ConfigDict(frozen=True)

    id: int
    display_name: str
    original_filename: str
    stored_filename: str
    storage_path: str
    uploaded_at: datetime

    @classmethod
    def from_row(cls, row: FontAsset) -> FontAssetRecord:
        return cls(
            id=row.id,
            display_name=row.display_name,
            original_filename=row.original_filename,
            stored_filename=row.stored_filename,
            storage_path=row.storage_path,
            uploaded_at=row.uploaded_at,
        )

    def public_summary(self, public_url: str) -> dict[str, Any]:
        """Fields exposed to anonymous visitors of the preview panel."""
        return {
            "id": self.id,
            "displayName": self.display_name,
            "publicUrl": public_url,
        }

    def upload_summary(self, public_url: str) -> dict[str, Any]:
        """Fields returned to the administrator after an upload."""
        return {
            **self.public_summary(public_url),
            "storedFilename": self.stored_filename,
            "originalFilename": self.original_filename,
            "uploadedAt": self.uploaded_at.isoformat(),
        }
