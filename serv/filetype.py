import logging
from enum import Enum

from serv.errors import ValidationFailed

logger = logging.getLogger(__name__)

JPEG_HEADER = b"\xff\xd8\xff"
JPEG_FOOTER = b"\xff\xd9"
PNG_HEADER = b"\x89PNG\r\n\x1a\n"

# Buffers shorter than the longest signature are rejected outright.
MIN_LENGTH = max(len(JPEG_HEADER), len(JPEG_FOOTER), len(PNG_HEADER))


class FileType(Enum):
    JPEG = "jpeg"
    PNG = "png"

    @property
    def ext(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return f"image/{self.value}"


EXTENSIONS = {t.ext for t in FileType}


def sniff_image_type(data: bytes) -> FileType | None:
    """Classify ``data`` by its magic bytes only.

    JPEG needs both the start-of-image header and the end-of-image footer;
    PNG only needs the 8-byte signature. The body is never decoded, so a
    truncated PNG with an intact signature is still accepted.
    """
    if len(data) < MIN_LENGTH:
        logger.debug("rejected %d byte payload: too short", len(data))
        return None
    if data.startswith(JPEG_HEADER) and data.endswith(JPEG_FOOTER):
        return FileType.JPEG
    if data.startswith(PNG_HEADER):
        return FileType.PNG
    logger.debug("rejected payload: first_bytes=%r last_bytes=%r", data[:5], data[-5:])
    return None


def require_image(data: bytes) -> FileType:
    file_type = sniff_image_type(data)
    if file_type is None:
        raise ValidationFailed(f"unsupported payload ({len(data)} bytes)")
    return file_type
