import io
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional
from PIL import Image, UnidentifiedImageError

from src.core import config_manager

logger = logging.getLogger(__name__)

# Formats the vision endpoint accepts as-is
SUPPORTED_MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}

class InvalidInput(ValueError):
    """The capture surface produced nothing usable as an image."""

@dataclass(frozen=True)
class CapturedImage:
    content: bytes
    media_type: str
    filename: Optional[str] = None

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.content).decode('utf-8')

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.base64_data}"

def _transcode_to_jpeg(img: Image.Image) -> bytes:
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    buffered = io.BytesIO()
    img.save(buffered, format="JPEG", quality=90)
    return buffered.getvalue()

def capture(content: bytes, filename: Optional[str] = None) -> CapturedImage:
    """
    Turns raw upload bytes into the active CapturedImage.

    The declared media type always matches the payload: supported formats are
    passed through, anything else Pillow can decode is re-encoded as JPEG
    (unless disabled in config, in which case it is rejected).
    """
    if not content:
        raise InvalidInput("Empty image payload")

    try:
        with Image.open(io.BytesIO(content)) as img:
            img.load()
            fmt = (img.format or "").upper()
            media_type = SUPPORTED_MEDIA_TYPES.get(fmt)
            if media_type is None:
                if not config_manager.load_config().get('transcode_unsupported', True):
                    raise InvalidInput(f"Unsupported image format: {fmt or 'unknown'}")
                logger.info(f"Transcoding {fmt or 'unknown'} capture to JPEG")
                content = _transcode_to_jpeg(img)
                media_type = "image/jpeg"
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidInput(f"Could not decode image: {e}") from e

    logger.info(f"Captured {filename or 'image'} ({media_type}, {len(content)} bytes)")
    return CapturedImage(content=content, media_type=media_type, filename=filename)

def capture_data_url(data_url: str, filename: Optional[str] = None) -> CapturedImage:
    """Camera path: decodes a data:<type>;base64,<payload> URL and captures it."""
    if not data_url or "," not in data_url:
        raise InvalidInput("Malformed data URL")

    header, encoded = data_url.split(",", 1)
    if not header.startswith("data:") or ";base64" not in header:
        raise InvalidInput("Malformed data URL")

    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInput(f"Invalid base64 payload: {e}") from e

    return capture(content, filename=filename)
