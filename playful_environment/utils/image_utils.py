"""
Image utilities for loading, encoding and pixel access

QImage is the in-memory raster type throughout the application; these
helpers convert it to and from encoded bytes, base64 data URLs and numpy
RGBA arrays.
"""

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PyQt6.QtCore import QBuffer, QIODevice
from PyQt6.QtGui import QImage

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r'^data:(.+?);base64,(.+)$', re.DOTALL)

_MIME_TYPES = {
    'PNG': 'image/png',
    'JPG': 'image/jpeg',
    'JPEG': 'image/jpeg',
    'WEBP': 'image/webp',
}


def load_image_as_qimage(image_path: Path) -> Optional[QImage]:
    """
    Load image file as QImage

    Args:
        image_path: Path to image file

    Returns:
        QImage or None if load failed
    """
    if not image_path.exists():
        return None

    image = QImage(str(image_path))
    if image.isNull():
        return None

    return image


def mime_type_for(fmt: str) -> str:
    """MIME type for a Qt image format name."""
    return _MIME_TYPES.get(fmt.upper(), 'application/octet-stream')


def encode_qimage(image: QImage, fmt: str = "PNG", quality: int = -1) -> bytes:
    """
    Encode QImage to bytes

    Args:
        image: Source QImage
        fmt: Qt format name ("PNG", "JPEG", ...)
        quality: 0-100 for lossy formats, -1 for the codec default

    Returns:
        Encoded bytes

    Raises:
        ValueError: If the image is null or the codec fails
    """
    if image.isNull():
        raise ValueError("Cannot encode a null image")

    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    ok = image.save(buffer, fmt, quality)
    buffer.close()
    if not ok:
        raise ValueError(f"Failed to encode image as {fmt}")
    return bytes(buffer.data())


def decode_image_bytes(data: bytes) -> Optional[QImage]:
    """Decode encoded image bytes, returning None on failure."""
    if not data:
        return None
    image = QImage()
    if not image.loadFromData(data):
        return None
    return image


def to_data_url(image: QImage, fmt: str = "PNG", quality: int = -1) -> str:
    """Encode QImage as a base64 data URL."""
    encoded = base64.b64encode(encode_qimage(image, fmt, quality)).decode('ascii')
    return f"data:{mime_type_for(fmt)};base64,{encoded}"


def parse_data_url(data_url: str) -> Optional[Tuple[str, str]]:
    """
    Split a base64 data URL into its MIME type and payload

    Returns:
        (mime_type, base64_data) or None if the string is not a data URL
    """
    if not isinstance(data_url, str):
        return None
    match = _DATA_URL_RE.match(data_url)
    if not match:
        return None
    return match.group(1), match.group(2)


def data_url_to_qimage(data_url: str) -> Optional[QImage]:
    """Decode a base64 data URL into a QImage, or None on any failure."""
    parsed = parse_data_url(data_url)
    if parsed is None:
        return None
    try:
        raw = base64.b64decode(parsed[1], validate=True)
    except (binascii.Error, ValueError):
        logger.debug("Data URL payload is not valid base64")
        return None
    return decode_image_bytes(raw)


def qimage_to_rgba_array(image: QImage) -> np.ndarray:
    """
    Copy QImage pixels into a (height, width, 4) uint8 RGBA array

    Alpha is straight (not premultiplied).
    """
    if image.format() != QImage.Format.Format_RGBA8888:
        image = image.convertToFormat(QImage.Format.Format_RGBA8888)

    width, height = image.width(), image.height()
    bytes_per_line = image.bytesPerLine()

    ptr = image.constBits()
    ptr.setsize(bytes_per_line * height)
    rows = np.array(ptr, dtype=np.uint8).reshape((height, bytes_per_line))
    return rows[:, :width * 4].reshape((height, width, 4)).copy()


def rgba_array_to_qimage(array: np.ndarray) -> QImage:
    """Build a QImage from a (height, width, 4) uint8 RGBA array."""
    height, width = array.shape[:2]
    data = np.ascontiguousarray(array, dtype=np.uint8).tobytes()
    # Copy so the QImage owns its pixels once `data` is released
    return QImage(data, width, height, width * 4, QImage.Format.Format_RGBA8888).copy()


__all__ = [
    'load_image_as_qimage',
    'mime_type_for',
    'encode_qimage',
    'decode_image_bytes',
    'to_data_url',
    'parse_data_url',
    'data_url_to_qimage',
    'qimage_to_rgba_array',
    'rgba_array_to_qimage',
]
