"""Materialized-path helpers.

Every item carries its full absolute path. Folders end with ``/``, files
never do. There are no parent pointers: hierarchy is recovered by comparing
an item's path against ``directory + name (+ "/")``.
"""

from __future__ import annotations

from netdrive.errors import ValidationError

SEP = "/"
ROOT = "/"

FILE = "file"
FOLDER = "folder"
KINDS = (FILE, FOLDER)


def normalize_directory(path: str | None) -> str:
    """Return ``path`` as a directory path: absolute, with trailing separator."""
    if not path:
        return ROOT
    if not path.startswith(SEP):
        raise ValidationError(f"Path must be absolute: {path!r}")
    if not path.endswith(SEP):
        path += SEP
    segments = path[1:-1].split(SEP) if path != ROOT else []
    for segment in segments:
        if segment in ("", ".", ".."):
            raise ValidationError(f"Invalid path segment in {path!r}")
    return path


def validate_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Name must not be empty")
    if SEP in name or name in (".", ".."):
        raise ValidationError(f"Invalid name: {name!r}")
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in name):
        raise ValidationError(f"Name contains control characters: {name!r}")
    return name


def validate_kind(kind: str | None) -> str:
    if kind not in KINDS:
        raise ValidationError(f"Type must be one of {', '.join(KINDS)}, got {kind!r}")
    return kind


def item_path(directory: str, name: str, kind: str) -> str:
    """Path of an item named ``name`` directly inside ``directory``."""
    path = directory + name
    if kind == FOLDER:
        path += SEP
    return path


def parent_of(path: str) -> str:
    """Directory that holds the item stored at ``path``.

    >>> parent_of("/a/b/")
    '/a/'
    >>> parent_of("/a/x.txt")
    '/a/'
    """
    if path == ROOT:
        return ROOT
    trimmed = path[:-1] if path.endswith(SEP) else path
    return trimmed[: trimmed.rfind(SEP) + 1]


def is_direct_child(path: str, name: str, kind: str, directory: str) -> bool:
    """Exact one-level containment. Deeper descendants never match."""
    return path == item_path(directory, name, kind)


def is_within(path: str, folder_path: str) -> bool:
    """True if ``path`` is ``folder_path`` itself or anywhere below it."""
    return path.startswith(folder_path)
