"""File schemas — item records and request/response bodies."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileItem(BaseModel):
    """A file or folder record, addressed by its materialized path."""
    model_config = ConfigDict(from_attributes=True)

    id: str = ""  # assigned by the metadata store on insert
    name: str
    type: Literal["file", "folder"]
    size: int | None = None
    last_modified: datetime
    path: str
    mime_type: str | None = None
    content: str | None = None

    @field_validator("last_modified")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """SQLite hands back naive datetimes; stores always write UTC."""
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"


class CreateItemRequest(BaseModel):
    """Body of POST /files. Required fields are checked by the service."""
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    type: str | None = None
    size: int | None = Field(default=None, ge=0)
    path: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")
    content: str | None = None


class MoveItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: str | None = Field(default=None, alias="itemId")
    target_path: str | None = Field(default=None, alias="targetPath")
    new_name: str | None = Field(default=None, alias="newName")


class DeleteResponse(BaseModel):
    success: bool = True
    deleted: FileItem


class MoveResponse(BaseModel):
    success: bool = True
    moved: FileItem
