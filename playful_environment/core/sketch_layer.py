"""
SketchLayer - Drawable raster with bounded snapshot undo

Pattern: Snapshot history (full-raster captures, no command log)

The layer owns a transparent ARGB raster the size of the base photo and a
FIFO-bounded stack of PNG snapshots. A snapshot is taken before each stroke,
so undo always returns to the state before the most recent stroke. There is
no redo: undo is destructive.
"""

import logging
from collections import deque
from typing import Deque, Optional

import numpy as np
from PyQt6.QtCore import Qt, QSize
from PyQt6.QtGui import QImage

from ..config import Config
from ..utils.image_utils import encode_qimage, decode_image_bytes, qimage_to_rgba_array

logger = logging.getLogger(__name__)


class SketchLayer:
    """
    Mutable sketch raster plus its undo history.

    Raster access failures never propagate: they are logged and treated as
    "no ink" or as a no-op so the editing session stays usable.

    Usage:
        layer = SketchLayer(800, 600)
        layer.save_snapshot()
        ...paint into layer.image...
        layer.undo()
    """

    RASTER_FORMAT = QImage.Format.Format_ARGB32_Premultiplied

    def __init__(self, width: int = 0, height: int = 0,
                 max_snapshots: int = Config.MAX_UNDO_SNAPSHOTS):
        self._max_snapshots = max_snapshots
        self._snapshots: Deque[bytes] = deque(maxlen=max_snapshots)
        self._image = self._blank(width, height)

    @classmethod
    def _blank(cls, width: int, height: int) -> QImage:
        image = QImage(max(0, width), max(0, height), cls.RASTER_FORMAT)
        if not image.isNull():
            image.fill(Qt.GlobalColor.transparent)
        return image

    # ==================== Properties ====================

    @property
    def image(self) -> QImage:
        """The live raster. Painters draw directly into it."""
        return self._image

    @property
    def width(self) -> int:
        return self._image.width()

    @property
    def height(self) -> int:
        return self._image.height()

    def size(self) -> QSize:
        return self._image.size()

    def is_null(self) -> bool:
        return self._image.isNull()

    @property
    def max_snapshots(self) -> int:
        return self._max_snapshots

    @property
    def snapshot_count(self) -> int:
        return len(self._snapshots)

    def can_undo(self) -> bool:
        return bool(self._snapshots)

    # ==================== Lifecycle ====================

    def reset(self, width: int, height: int):
        """Replace the raster with a blank one and drop all history."""
        self._image = self._blank(width, height)
        self._snapshots.clear()
        logger.debug(f"Sketch layer reset to {width}x{height}")

    def replace_image(self, image: QImage):
        """Overwrite the raster pixels, keeping the current size."""
        if image.isNull():
            return
        if image.size() != self._image.size():
            image = image.scaled(
                self._image.size(),
                Qt.AspectRatioMode.IgnoreAspectRatio,
                Qt.TransformationMode.SmoothTransformation
            )
        self._image = image.convertToFormat(self.RASTER_FORMAT)

    # ==================== History ====================

    def save_snapshot(self):
        """Capture the current raster and push it onto the undo stack."""
        if self._image.isNull():
            return
        try:
            snapshot = encode_qimage(self._image, Config.SNAPSHOT_FORMAT)
        except ValueError as e:
            logger.warning(f"Snapshot capture failed: {e}")
            return
        # deque(maxlen) evicts the oldest snapshot on overflow
        self._snapshots.append(snapshot)

    def undo(self) -> bool:
        """
        Restore the most recent snapshot.

        With no snapshots left the raster is cleared instead, which is the
        implicit state before the first stroke.

        Returns:
            True if a snapshot was restored
        """
        if not self._snapshots:
            self._fill_transparent()
            return False

        snapshot = self._snapshots.pop()
        restored = decode_image_bytes(snapshot)
        if restored is None:
            logger.warning("Snapshot restore failed; raster left unchanged")
            return False

        self.replace_image(restored)
        return True

    def clear(self):
        """Erase every pixel and discard the whole undo stack."""
        self._fill_transparent()
        self._snapshots.clear()

    def _fill_transparent(self):
        if not self._image.isNull():
            self._image.fill(Qt.GlobalColor.transparent)

    # ==================== Inspection ====================

    def alpha_channel(self) -> Optional[np.ndarray]:
        """(height, width) uint8 alpha values, or None if unreadable."""
        if self._image.isNull():
            return None
        try:
            return qimage_to_rgba_array(self._image)[:, :, 3]
        except (ValueError, TypeError, RuntimeError) as e:
            logger.debug(f"Raster read failed: {e}")
            return None

    def has_ink(self) -> bool:
        """True if any pixel has non-zero alpha."""
        alpha = self.alpha_channel()
        if alpha is None:
            return False
        return bool(np.any(alpha))


__all__ = ['SketchLayer']
