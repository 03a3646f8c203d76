"""Font asset model: one row per uploaded font."""

from __future__ import annotations

from datetime import datetime

from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from typetester.db.base import Base


class FontAsset(Base):
    """Metadata for a font file held by the obfuscating store."""

    __tablename__ = "font_assets"
    __table_args__ = (
        Index("ix_font_assets_uploaded_at", "uploaded_at"),
        # AUTOINCREMENT keeps SQLite from handing out ids of deleted rows
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    stored_filename: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)
