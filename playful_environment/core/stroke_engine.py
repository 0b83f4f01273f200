"""
StrokeMapper - Pointer events to raster strokes

Turns pointer-down/move/up events in display coordinates into paint on the
sketch layer. Three mutually exclusive tools:
- Brush: round-capped line, source-over blending
- Eraser: same geometry, destination-out blending (color ignored)
- Eyedropper: samples one pixel on pointer-down and switches back to Brush
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QColor, QPainter, QPainterPath, QPen

from ..config import Config
from ..utils.color_utils import hex_to_rgb, rgb_to_hex, alpha_to_opacity, opacity_to_alpha
from ..utils.coordinate_utils import CoordinateConverter
from .sketch_layer import SketchLayer

logger = logging.getLogger(__name__)


class DrawingTool(Enum):
    """Available sketch tools."""
    BRUSH = 1       # Paint with the brush color
    ERASER = 2      # Remove paint
    EYEDROPPER = 3  # Pick the brush color from the sketch


class StrokeState(Enum):
    """Whether a stroke is in progress."""
    IDLE = 0
    DRAWING = 1


@dataclass
class BrushSettings:
    """Current brush configuration."""
    color: str = Config.DEFAULT_BRUSH_COLOR
    width: int = Config.DEFAULT_BRUSH_WIDTH
    opacity: float = Config.DEFAULT_BRUSH_OPACITY

    def rgb(self) -> Tuple[int, int, int]:
        return hex_to_rgb(self.color)


@dataclass
class Stroke:
    """One stroke, from pointer-down to pointer-up, in raster coordinates."""
    tool: DrawingTool
    color: Tuple[int, int, int]
    opacity: float
    width: int
    points: List[Tuple[float, float]] = field(default_factory=list)


@dataclass(frozen=True)
class SampledColor:
    """Result of an eyedropper pick."""
    color: str
    opacity: float


class StrokeMapper:
    """
    Maps pointer events onto the sketch layer.

    State machine:
        IDLE --pointer_down (brush/eraser)--> DRAWING
        DRAWING --pointer_move--> DRAWING
        DRAWING --pointer_up | pointer_leave | pointer_cancel--> IDLE

    A snapshot is saved on the layer before the first pixel of every stroke,
    so undo reverts to the pre-stroke raster. End events while IDLE do
    nothing.
    """

    def __init__(self, layer: SketchLayer, brush: Optional[BrushSettings] = None):
        self._layer = layer
        self._brush = brush or BrushSettings()
        self._tool = DrawingTool.BRUSH
        self._state = StrokeState.IDLE
        self._stroke: Optional[Stroke] = None
        self._stroke_base = None  # pre-stroke raster copy
        self._coord = CoordinateConverter()
        self._coord.set_raster_size(layer.width, layer.height)
        self._has_ink = layer.has_ink()

    # ==================== Properties ====================

    @property
    def layer(self) -> SketchLayer:
        return self._layer

    @property
    def tool(self) -> DrawingTool:
        return self._tool

    @property
    def state(self) -> StrokeState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._state == StrokeState.DRAWING

    @property
    def brush(self) -> BrushSettings:
        return self._brush

    @property
    def current_stroke(self) -> Optional[Stroke]:
        return self._stroke

    @property
    def has_ink(self) -> bool:
        """Ink-presence flag as of the last finished stroke or layer change."""
        return self._has_ink

    @property
    def coordinates(self) -> CoordinateConverter:
        return self._coord

    # ==================== Configuration ====================

    def set_tool(self, tool: DrawingTool):
        """Select a tool. An active stroke is finished first."""
        if tool == self._tool:
            return
        self.end_stroke()
        self._tool = tool

    def set_brush(self, color: Optional[str] = None, width: Optional[int] = None,
                  opacity: Optional[float] = None):
        """Update brush settings; width and opacity are clamped."""
        if color is not None:
            self._brush.color = rgb_to_hex(hex_to_rgb(color))
        if width is not None:
            self._brush.width = max(Config.MIN_BRUSH_WIDTH, min(Config.MAX_BRUSH_WIDTH, int(width)))
        if opacity is not None:
            self._brush.opacity = max(0.0, min(1.0, float(opacity)))

    def set_display_rect(self, rect: QRectF):
        """Set where the raster is drawn on screen."""
        self._coord.set_display_rect(rect)

    def sync_layer(self):
        """Re-read layer size and ink after the layer was reset, cleared or undone."""
        self.end_stroke()
        self._coord.set_raster_size(self._layer.width, self._layer.height)
        self.refresh_ink()

    def refresh_ink(self) -> bool:
        self._has_ink = self._layer.has_ink()
        return self._has_ink

    def map_to_raster(self, display_pos: QPointF) -> QPointF:
        """Scale a display position by raster size / displayed size."""
        return self._coord.display_to_raster(display_pos)

    # ==================== Pointer Events ====================

    def pointer_down(self, display_pos: QPointF) -> bool:
        """
        Start a stroke, or sample a color with the eyedropper.

        Returns:
            True if the event changed the raster or the brush
        """
        if self._layer.is_null():
            return False
        # Letterbox margins are not part of the photo
        if not self._coord.is_inside_rect(display_pos):
            return False

        pos = self.map_to_raster(display_pos)

        if self._tool == DrawingTool.EYEDROPPER:
            return self.pick_color(pos) is not None

        if self._state == StrokeState.DRAWING:
            return False

        self._layer.save_snapshot()
        self._stroke_base = self._layer.image.copy()
        self._stroke = Stroke(
            tool=self._tool,
            color=self._brush.rgb(),
            opacity=self._brush.opacity,
            width=self._brush.width,
            points=[(pos.x(), pos.y())],
        )
        self._state = StrokeState.DRAWING
        self._render_stroke()
        return True

    def pointer_move(self, display_pos: QPointF) -> bool:
        """Extend the active stroke. Ignored while IDLE."""
        if self._state != StrokeState.DRAWING or self._stroke is None:
            return False
        pos = self.map_to_raster(display_pos)
        self._stroke.points.append((pos.x(), pos.y()))
        self._render_stroke()
        return True

    def pointer_up(self) -> Optional[Stroke]:
        return self.end_stroke()

    def pointer_leave(self) -> Optional[Stroke]:
        return self.end_stroke()

    def pointer_cancel(self) -> Optional[Stroke]:
        return self.end_stroke()

    def end_stroke(self) -> Optional[Stroke]:
        """
        Finalize the active stroke and recompute the ink flag.

        Returns:
            The finished stroke, or None if no stroke was active
        """
        if self._state != StrokeState.DRAWING:
            return None

        stroke = self._stroke
        self._state = StrokeState.IDLE
        self._stroke = None
        self._stroke_base = None
        self.refresh_ink()
        return stroke

    # ==================== Eyedropper ====================

    def pick_color(self, raster_pos: QPointF) -> Optional[SampledColor]:
        """
        Sample the sketch pixel at a raster position.

        A pixel with non-zero alpha becomes the brush color and opacity and
        the tool reverts to Brush. A transparent or out-of-range pixel
        changes nothing.
        """
        x, y = int(raster_pos.x()), int(raster_pos.y())
        image = self._layer.image
        if not image.valid(x, y):
            return None

        # Premultiplied storage rounds the color channels of translucent pixels
        pixel = image.pixelColor(x, y)
        if pixel.alpha() == 0:
            return None

        sampled = SampledColor(
            color=rgb_to_hex((pixel.red(), pixel.green(), pixel.blue())),
            opacity=alpha_to_opacity(pixel.alpha()),
        )
        self._brush.color = sampled.color
        self._brush.opacity = sampled.opacity
        self._tool = DrawingTool.BRUSH
        logger.debug(f"Eyedropper picked {sampled.color} at opacity {sampled.opacity}")
        return sampled

    # ==================== Rendering ====================

    def _stroke_pen(self, stroke: Stroke) -> QPen:
        if stroke.tool == DrawingTool.ERASER:
            color = QColor(0, 0, 0, 255)
        else:
            color = QColor(*stroke.color, opacity_to_alpha(stroke.opacity))
        return QPen(color, stroke.width, Qt.PenStyle.SolidLine,
                    Qt.PenCapStyle.RoundCap, Qt.PenJoinStyle.RoundJoin)

    def _render_stroke(self):
        """
        Redraw the active stroke over the pre-stroke raster.

        Redrawing the whole path each move keeps a translucent stroke at a
        uniform opacity where it crosses itself.
        """
        stroke = self._stroke
        if stroke is None or self._stroke_base is None:
            return

        painter = QPainter(self._layer.image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
            painter.drawImage(0, 0, self._stroke_base)

            if stroke.tool == DrawingTool.ERASER:
                painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_DestinationOut)
            else:
                painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)

            painter.setPen(self._stroke_pen(stroke))
            painter.setBrush(Qt.BrushStyle.NoBrush)

            first = QPointF(*stroke.points[0])
            if len(set(stroke.points)) == 1:
                # Zero-length stroke still leaves a round dot
                painter.drawPoint(first)
            else:
                path = QPainterPath(first)
                for x, y in stroke.points[1:]:
                    path.lineTo(x, y)
                painter.drawPath(path)
        finally:
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)
            painter.end()


__all__ = ['DrawingTool', 'StrokeState', 'BrushSettings', 'Stroke', 'SampledColor', 'StrokeMapper']
