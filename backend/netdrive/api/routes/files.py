"""File API routes — directory listing, create, move, delete, download."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Depends, Response

from netdrive.api.deps import AuditRecorder, get_audit_recorder
from netdrive.schemas.files import (
    CreateItemRequest,
    DeleteResponse,
    FileItem,
    MoveItemRequest,
    MoveResponse,
)
from netdrive.services import get_file_service
from netdrive.services.file_service import FileService

router = APIRouter()


@router.get("", response_model=list[FileItem])
async def list_files(path: str = "/", files: FileService = Depends(get_file_service)):
    """Direct children of ``path`` — folders first, then by name."""
    return await files.list_directory(path)


@router.post("", response_model=FileItem)
async def create_item(
    body: CreateItemRequest,
    background: BackgroundTasks,
    files: FileService = Depends(get_file_service),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Create a file (upload) or folder inside directory ``path``."""
    item = await files.create(
        name=body.name,
        type=body.type,
        path=body.path,
        size=body.size,
        mime_type=body.mime_type,
        content=body.content,
    )
    if item.is_folder:
        audit.record(background, "CREATE_FOLDER", f"Created folder: {item.path}")
    else:
        audit.record(background, "UPLOAD", f"Uploaded {item.path} ({item.size} bytes)")
    return item


@router.delete("", response_model=DeleteResponse)
async def delete_item(
    background: BackgroundTasks,
    id: str | None = None,
    files: FileService = Depends(get_file_service),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    deleted = await files.delete(id)
    audit.record(background, "DELETE", f"Deleted {deleted.type}: {deleted.path}")
    return DeleteResponse(deleted=deleted)


@router.post("/move", response_model=MoveResponse)
async def move_item(
    body: MoveItemRequest,
    background: BackgroundTasks,
    files: FileService = Depends(get_file_service),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Move (and optionally rename) an item. Folder contents are not re-pathed."""
    moved = await files.move(body.item_id, body.target_path, body.new_name)
    audit.record(background, "MOVE", f"Moved {moved.type}: {moved.name} to {moved.path}")
    return MoveResponse(moved=moved)


@router.get("/{item_id}", response_model=FileItem)
async def get_item(item_id: str, files: FileService = Depends(get_file_service)):
    return await files.get(item_id)


@router.get("/{item_id}/download")
async def download_item(item_id: str, files: FileService = Depends(get_file_service)):
    """Raw file bytes with the stored media type."""
    item, data = await files.read_content(item_id)
    return Response(
        content=data,
        media_type=item.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(item.name)}"},
    )
