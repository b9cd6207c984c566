"""File/folder metadata — relational variant of the item collection."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from netdrive.models.base import Base


class FileRecord(Base):
    __tablename__ = "files"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)  # file | folder
    size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # Materialized path; folders end with "/". Unique = no duplicate siblings.
    path: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    parent_path: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_modified: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<FileRecord(id={self.id}, path='{self.path}')>"
