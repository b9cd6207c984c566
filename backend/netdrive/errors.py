"""Error taxonomy shared by the storage layer and the HTTP API."""

from __future__ import annotations


class NetDriveError(Exception):
    """Base class for errors reported to API callers."""

    category = "error"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.category, "detail": self.detail}


class ValidationError(NetDriveError):
    """A required field is missing or malformed. Raised before any side effect."""

    category = "validation_error"
    status_code = 400


class NotFoundError(NetDriveError):
    category = "not_found"
    status_code = 404


class ConflictError(NetDriveError):
    """An item with the same name and kind already exists in the directory."""

    category = "conflict"
    status_code = 409


class StorageError(NetDriveError):
    category = "storage_error"
    status_code = 500


class StorageReadError(StorageError):
    category = "storage_read_error"


class StorageWriteError(StorageError):
    category = "storage_write_error"


class BlobInconsistencyWarning(UserWarning):
    """Blob operation failed while the metadata change went through.

    Logged, never raised to callers.
    """
