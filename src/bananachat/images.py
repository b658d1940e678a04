"""Image encoding helpers.

Images travel through the application as base64 text with no data URI
prefix. The prefix is stripped when an image enters the system and only
re-added when something needs to render it.
"""

import base64
import binascii
import io
import mimetypes
from pathlib import Path

from PIL import Image

DEFAULT_MIME_TYPE = "image/jpeg"

# Inline request data limit of the hosted model APIs
MAX_IMAGE_BYTES = 20 * 1024 * 1024


def strip_data_uri(value: str) -> str:
    """Remove a ``data:<mime>;base64,`` prefix if present."""
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value


def decode_image(data: str) -> bytes:
    """Decode a base64 image payload (prefix optional).

    Raises:
        ValueError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(strip_data_uri(data), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


def sniff_mime_type(data: str) -> str:
    """Identify the media type of a base64 payload with Pillow.

    Only the image header is read. Falls back to DEFAULT_MIME_TYPE when
    the payload is not valid base64 or Pillow does not recognise it.
    """
    try:
        with Image.open(io.BytesIO(decode_image(data))) as image:
            image_format = image.format
    except (ValueError, OSError, Image.DecompressionBombError):
        return DEFAULT_MIME_TYPE
    return Image.MIME.get(image_format, DEFAULT_MIME_TYPE)


def to_data_uri(data: str, mime_type: str | None = None) -> str:
    """Re-add the data URI prefix for rendering."""
    payload = strip_data_uri(data)
    return f"data:{mime_type or sniff_mime_type(payload)};base64,{payload}"


def encode_image_file(path: str | Path) -> str:
    """Read an image file and return it as prefix-free base64.

    Args:
        path: Path to the image

    Returns:
        Base64 text of the file contents

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not an image or is too large
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise FileNotFoundError(f"Image not found: {file_path}")

    mime_type, _ = mimetypes.guess_type(file_path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(f"Not an image file: {file_path.name}")

    raw = file_path.read_bytes()
    if len(raw) > MAX_IMAGE_BYTES:
        size_mb = len(raw) / (1024 * 1024)
        raise ValueError(f"Image too large ({size_mb:.1f}MB), limit is 20MB")

    return base64.b64encode(raw).decode("ascii")


def image_extension(data: str) -> str:
    """File extension matching the payload's media type."""
    mime_type = sniff_mime_type(data)
    if mime_type == "image/jpeg":
        return ".jpg"
    return mimetypes.guess_extension(mime_type) or ".img"
