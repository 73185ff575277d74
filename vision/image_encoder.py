"""Read a user-selected image file into a base64 payload.

No decoding, resizing or type checking happens here; the bytes are passed
through as-is and the caller decides which files are acceptable.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from core.schemas import DEFAULT_MIME_TYPE

logger = logging.getLogger("st.vision.encoder")


class ImageReadError(OSError):
    """The image file could not be read."""


@dataclass(frozen=True)
class EncodedImage:
    data: str
    mime_type: str


def guess_mime_type(image_path: Path | str) -> str:
    mime_type, _ = mimetypes.guess_type(str(image_path))
    return mime_type or DEFAULT_MIME_TYPE


async def encode_image(image_path: Path | str) -> str:
    """Read the file without blocking the event loop and return base64 text."""
    path = Path(image_path)
    try:
        raw = await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        logger.error("Failed to read image %s: %s", path, exc)
        raise ImageReadError(f"Failed to read image {path}: {exc}") from exc
    logger.debug("Read %d bytes from %s", len(raw), path)
    return base64.b64encode(raw).decode("utf-8")


async def load_image(image_path: Path | str) -> EncodedImage:
    """Encode the file and pair it with a MIME type guessed from its name."""
    data = await encode_image(image_path)
    return EncodedImage(data=data, mime_type=guess_mime_type(image_path))
