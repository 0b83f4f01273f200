"""
Composite and mask builders

Combines the base photo with the sketch layer for the concept generator:
- Composite mode: one flattened PNG, sketch drawn over the photo
- Inpainting mode: the photo plus a binary black/white mask

All outputs use the base photo's natural resolution; the sketch is rescaled
to it when the two differ.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from PyQt6.QtCore import Qt, QRectF, QSize
from PyQt6.QtGui import QImage, QPainter

from ..utils.image_utils import qimage_to_rgba_array, rgba_array_to_qimage, to_data_url
from .preview import downscale_data_url, downscale_mask_data_url

logger = logging.getLogger(__name__)


class CompositeMode(Enum):
    """How the sketch is handed to the concept generator."""
    COMPOSITE = "composite"
    INPAINTING = "inpainting"


@dataclass(frozen=True)
class ConceptPayload:
    """Encoded images for one concept request."""
    mode: CompositeMode
    image_data: Optional[str] = None
    base_image_data: Optional[str] = None
    mask_data: Optional[str] = None


def scale_sketch_to(sketch: QImage, size: QSize) -> QImage:
    """Draw the sketch stretched onto a transparent raster of the given size."""
    scaled = QImage(size, QImage.Format.Format_ARGB32_Premultiplied)
    scaled.fill(Qt.GlobalColor.transparent)
    if sketch.isNull():
        return scaled

    painter = QPainter(scaled)
    painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
    painter.drawImage(QRectF(0, 0, size.width(), size.height()), sketch)
    painter.end()
    return scaled


def build_composite(base: QImage, sketch: QImage) -> QImage:
    """
    Flatten the sketch over the base photo.

    Args:
        base: Base photo at natural resolution
        sketch: Sketch layer (any size)

    Returns:
        QImage with the base photo's dimensions
    """
    size = base.size()
    output = QImage(size, QImage.Format.Format_ARGB32_Premultiplied)
    output.fill(Qt.GlobalColor.transparent)

    painter = QPainter(output)
    painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
    target = QRectF(0, 0, size.width(), size.height())
    painter.drawImage(target, base)
    painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)
    if not sketch.isNull():
        painter.drawImage(target, sketch)
    painter.end()
    return output


def build_mask(sketch: QImage, size: QSize) -> QImage:
    """
    Binary inpainting mask for a sketch.

    Every pixel starts opaque black; pixels where the rescaled sketch has
    alpha > 0 become opaque white. There are no gray values.
    """
    alpha = qimage_to_rgba_array(scale_sketch_to(sketch, size))[:, :, 3]

    mask = np.zeros((size.height(), size.width(), 4), dtype=np.uint8)
    mask[:, :, 3] = 255
    mask[alpha > 0, :3] = 255
    return rgba_array_to_qimage(mask)


def build_inpainting_images(base: QImage, sketch: QImage) -> Tuple[QImage, QImage]:
    """Return (base photo, mask), both at the photo's natural resolution."""
    return base.copy(), build_mask(sketch, base.size())


def prepare_concept_payload(base: QImage, sketch: QImage, mode: CompositeMode,
                            downscale: bool = True) -> ConceptPayload:
    """
    Build and encode the images for a concept request.

    Args:
        base: Base photo at natural resolution
        sketch: Sketch layer
        mode: Composite or inpainting
        downscale: Run outputs through the upload preview scaler

    Returns:
        ConceptPayload with data URLs for the chosen mode
    """
    if base.isNull():
        raise ValueError("A base image is required to build a concept payload")

    if mode == CompositeMode.COMPOSITE:
        image_data = to_data_url(build_composite(base, sketch), "PNG")
        if downscale:
            image_data = downscale_data_url(image_data)
        return ConceptPayload(mode=mode, image_data=image_data)

    base_image, mask = build_inpainting_images(base, sketch)
    base_data = to_data_url(base_image, "PNG")
    mask_data = to_data_url(mask, "PNG")
    if downscale:
        base_data = downscale_data_url(base_data)
        mask_data = downscale_mask_data_url(mask_data)
    logger.debug(f"Inpainting payload built at {base.width()}x{base.height()}")
    return ConceptPayload(mode=mode, base_image_data=base_data, mask_data=mask_data)


__all__ = [
    'CompositeMode',
    'ConceptPayload',
    'scale_sketch_to',
    'build_composite',
    'build_mask',
    'build_inpainting_images',
    'prepare_concept_payload',
]
