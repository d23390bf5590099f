"""File to inline payload conversion.

Hidden design decisions:
- How MIME types are determined (extension lookup, data URL header)
- Base64 encoding of raw bytes
- Size limit for inline request payloads
"""

import asyncio
import base64
import binascii
import mimetypes
import re
from pathlib import Path

from ..errors import AssetError
from ..models import InlineAsset

# Gemini rejects requests whose inline data exceeds 20 MB
MAX_INLINE_BYTES = 20 * 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*),(?P<data>.*)$", re.DOTALL)


def guess_mime_type(path: str | Path) -> str:
    """Guess the MIME type from the file extension."""
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or DEFAULT_MIME_TYPE


def bytes_to_inline_asset(data: bytes, mime_type: str) -> InlineAsset:
    """Encode raw bytes as an inline asset.

    Raises:
        AssetError: If the payload is empty or too large to send inline
    """
    if not data:
        raise AssetError("File processing failed: file is empty")
    if len(data) > MAX_INLINE_BYTES:
        raise AssetError(
            f"File processing failed: {len(data):,} bytes exceeds the "
            f"{MAX_INLINE_BYTES:,} byte inline limit"
        )
    return InlineAsset(
        mime_type=mime_type or DEFAULT_MIME_TYPE,
        data=base64.b64encode(data).decode("ascii"),
    )


async def file_to_inline_asset(path: str | Path, mime_type: str | None = None) -> InlineAsset:
    """Read a file and convert it to an inline asset.

    The read runs in a worker thread.

    Args:
        path: File to read
        mime_type: Declared MIME type (guessed from the extension when None)

    Raises:
        AssetError: If the file cannot be read or is not a valid payload
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise AssetError(f"File processing failed: {file_path} is not a file")
    try:
        data = await asyncio.to_thread(file_path.read_bytes)
    except OSError as e:
        raise AssetError(f"File processing failed: {e}") from e
    return bytes_to_inline_asset(data, mime_type or guess_mime_type(file_path))


def parse_data_url(url: str) -> InlineAsset:
    """Convert a ``data:<mime>;base64,<payload>`` URL to an inline asset."""
    match = _DATA_URL_RE.match(url.strip())
    if not match:
        raise AssetError("File processing failed: not a data URL")
    if ";base64" not in match.group("params"):
        raise AssetError("File processing failed: data URL is not base64 encoded")
    payload = match.group("data")
    try:
        base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise AssetError(f"File processing failed: invalid base64 payload ({e})") from e
    return InlineAsset(mime_type=match.group("mime") or DEFAULT_MIME_TYPE, data=payload)


def to_data_url(asset: InlineAsset) -> str:
    return f"data:{asset.mime_type};base64,{asset.data}"


def decode_asset(asset: InlineAsset) -> bytes:
    """Decode the base64 payload back to raw bytes."""
    try:
        return base64.b64decode(asset.data, validate=True)
    except binascii.Error as e:
        raise AssetError(f"Invalid inline payload: {e}") from e


def is_image(asset: InlineAsset) -> bool:
    return asset.mime_type.startswith("image/")
