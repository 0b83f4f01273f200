"""
Upload preview scaling

Shrinks images before they are sent to a collaborator so payloads stay
small: the larger side is capped at Config.PREVIEW_MAX_DIMENSION and the
result is re-encoded as JPEG at Config.PREVIEW_JPEG_QUALITY.
"""

import logging
from typing import Tuple

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QImage, QPainter

from ..config import Config
from ..utils.image_utils import data_url_to_qimage, to_data_url

logger = logging.getLogger(__name__)


def target_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """
    Proportional size whose larger side is at most max_dimension.

    Example:
        >>> target_size(2000, 1000, 1024)
        (1024, 512)
    """
    larger = max(width, height)
    if larger <= max_dimension:
        return width, height
    ratio = max_dimension / larger
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def downscale_image(image: QImage, max_dimension: int = Config.PREVIEW_MAX_DIMENSION,
                    smooth: bool = True) -> QImage:
    """Scale image down so its larger side fits max_dimension."""
    width, height = target_size(image.width(), image.height(), max_dimension)
    if (width, height) == (image.width(), image.height()):
        return image

    transform_mode = Qt.TransformationMode.SmoothTransformation if smooth else Qt.TransformationMode.FastTransformation
    return image.scaled(width, height, Qt.AspectRatioMode.IgnoreAspectRatio, transform_mode)


def _flatten(image: QImage) -> QImage:
    """Drop alpha onto black, as a JPEG encoder would."""
    flat = QImage(image.size(), QImage.Format.Format_RGB32)
    flat.fill(Qt.GlobalColor.black)
    painter = QPainter(flat)
    painter.drawImage(0, 0, image)
    painter.end()
    return flat


def downscale_data_url(data_url: str,
                       max_dimension: int = Config.PREVIEW_MAX_DIMENSION,
                       quality: int = Config.PREVIEW_JPEG_QUALITY) -> str:
    """
    Downscale and re-encode a data URL as JPEG.

    Returns the input unchanged if it cannot be decoded or encoded.
    """
    image = data_url_to_qimage(data_url)
    if image is None:
        logger.debug("Preview decode failed; sending original image")
        return data_url

    try:
        return to_data_url(_flatten(downscale_image(image, max_dimension)), "JPEG", quality)
    except ValueError as e:
        logger.warning(f"Preview encode failed, sending original image: {e}")
        return data_url


def downscale_mask_data_url(data_url: str,
                            max_dimension: int = Config.PREVIEW_MAX_DIMENSION) -> str:
    """
    Downscale a binary mask without introducing gray pixels.

    Uses nearest-neighbour sampling and stays PNG.
    """
    image = data_url_to_qimage(data_url)
    if image is None:
        logger.debug("Mask decode failed; sending original mask")
        return data_url

    try:
        return to_data_url(downscale_image(image, max_dimension, smooth=False), "PNG")
    except ValueError as e:
        logger.warning(f"Mask encode failed, sending original mask: {e}")
        return data_url


__all__ = ['target_size', 'downscale_image', 'downscale_data_url', 'downscale_mask_data_url']
