"""Content payload decoding.

Clients send file content either as plain text or as a data URI
(``data:<mime>;base64,<payload>``) produced by ``FileReader.readAsDataURL``.
"""

from __future__ import annotations

import base64
import binascii
import re

from netdrive.errors import ValidationError

DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*?);base64,(?P<payload>.*)$",
    re.DOTALL,
)


def is_data_uri(content: str) -> bool:
    return DATA_URI_RE.match(content) is not None


def decode_content(content: str | None) -> bytes:
    """Bytes to store for ``content``. ``None`` means an empty file."""
    if content is None:
        return b""
    match = DATA_URI_RE.match(content)
    if match is None:
        return content.encode("utf-8")
    try:
        return base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"Malformed base64 content: {e}")


def data_uri_mime_type(content: str | None) -> str | None:
    """Media type embedded in a data URI, if any."""
    if not content:
        return None
    match = DATA_URI_RE.match(content)
    if match is None:
        return None
    return match.group("mime") or None
