"""
Coordinate conversion utilities for the sketch canvas.

The sketch raster is sized to the base photo's natural resolution while the
widget shows it at whatever size fits the window. These helpers convert
between the two spaces.
"""

from typing import Optional, Tuple
from PyQt6.QtCore import QPointF, QRectF, QSizeF


def fit_rect(source_width: float, source_height: float,
             area_width: float, area_height: float) -> QRectF:
    """
    Largest rectangle with the source aspect ratio centered inside an area.

    Args:
        source_width: Natural width of the image
        source_height: Natural height of the image
        area_width: Width of the available display area
        area_height: Height of the available display area

    Returns:
        QRectF in display coordinates (empty if any size is non-positive)
    """
    if source_width <= 0 or source_height <= 0 or area_width <= 0 or area_height <= 0:
        return QRectF()

    scale = min(area_width / source_width, area_height / source_height)
    width = source_width * scale
    height = source_height * scale
    return QRectF((area_width - width) / 2.0, (area_height - height) / 2.0, width, height)


class CoordinateConverter:
    """
    Handles conversion between display coordinates and raster coordinates.

    The display rect is where the raster is drawn on screen; the raster size
    is the pixel size of the sketch layer. A pointer at display position p
    lands on raster position (p - rect.topLeft) * raster_size / rect.size.
    """

    def __init__(self):
        self._display_rect: Optional[QRectF] = None
        self._raster_size = QSizeF()

    def set_display_rect(self, rect: QRectF):
        """
        Set the on-screen rectangle the raster is drawn into.

        Should be called whenever the widget is resized or a new image loads.
        """
        self._display_rect = rect

    def get_display_rect(self) -> Optional[QRectF]:
        """Get the current display rectangle."""
        return self._display_rect

    def set_raster_size(self, width: int, height: int):
        """Set the pixel size of the raster being drawn on."""
        self._raster_size = QSizeF(width, height)

    def get_effective_rect(self) -> QRectF:
        """
        Get the effective display area.

        Falls back to a rect at the origin with the raster size, which maps
        coordinates one to one.
        """
        if self._display_rect is not None and self._display_rect.isValid():
            return self._display_rect
        return QRectF(QPointF(0, 0), self._raster_size)

    def scale_factors(self) -> Tuple[float, float]:
        """Raster pixels per display pixel along x and y."""
        rect = self.get_effective_rect()
        if rect.width() <= 0 or rect.height() <= 0:
            return (1.0, 1.0)
        return (self._raster_size.width() / rect.width(),
                self._raster_size.height() / rect.height())

    def display_to_raster(self, display_pos: QPointF) -> QPointF:
        """
        Convert a display position to raster coordinates.

        Example:
            An 800x600 raster shown in a 400x300 rect at the origin maps the
            display point (100, 100) to the raster point (200, 200).
        """
        rect = self.get_effective_rect()
        sx, sy = self.scale_factors()
        return QPointF((display_pos.x() - rect.x()) * sx,
                       (display_pos.y() - rect.y()) * sy)

    def is_inside_rect(self, display_pos: QPointF) -> bool:
        """Check if a display position is inside the drawn raster."""
        return self.get_effective_rect().contains(display_pos)


__all__ = ['CoordinateConverter', 'fit_rect']
