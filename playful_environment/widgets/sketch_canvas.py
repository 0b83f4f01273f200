"""
SketchCanvas - Base photo with a drawable sketch overlay

Shows the loaded photo letterboxed inside the widget with the sketch layer
drawn on top at the same rectangle. Pointer events are forwarded to the
StrokeMapper, which converts widget coordinates to the photo's natural
resolution.
"""

import logging
from typing import Optional

from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QEvent, QRectF, pyqtSignal
from PyQt6.QtGui import QColor, QCursor, QImage, QPainter

from ..core.sketch_layer import SketchLayer
from ..core.stroke_engine import BrushSettings, DrawingTool, StrokeMapper
from ..events.event_bus import EventBus, get_event_bus
from ..utils.coordinate_utils import fit_rect

logger = logging.getLogger(__name__)


class SketchCanvas(QWidget):
    """
    Drawing surface for one editing session.

    Features:
    - Brush, eraser and eyedropper tools
    - Snapshot undo and clear
    - Keeps the sketch at the photo's natural resolution
    """

    # Signals
    image_changed = pyqtSignal()
    stroke_finished = pyqtSignal()

    BACKGROUND_COLOR = QColor('#1e1e1e')

    def __init__(self, parent: Optional[QWidget] = None, event_bus: Optional[EventBus] = None):
        super().__init__(parent)

        self._event_bus = event_bus or get_event_bus()
        self._base_image = QImage()
        self._layer = SketchLayer()
        self._mapper = StrokeMapper(self._layer)

        self.setMinimumSize(320, 240)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setCursor(self._get_tool_cursor(self._mapper.tool))

    # ==================== Properties ====================

    @property
    def base_image(self) -> QImage:
        return self._base_image

    @property
    def layer(self) -> SketchLayer:
        return self._layer

    @property
    def mapper(self) -> StrokeMapper:
        return self._mapper

    @property
    def current_tool(self) -> DrawingTool:
        return self._mapper.tool

    @property
    def brush(self) -> BrushSettings:
        return self._mapper.brush

    def has_image(self) -> bool:
        return not self._base_image.isNull()

    def has_ink(self) -> bool:
        return self._mapper.has_ink

    # ==================== Image ====================

    def load_image(self, image: QImage) -> bool:
        """
        Start a new session on a photo.

        The sketch layer is resized to the photo and all undo history is
        discarded.
        """
        if image.isNull():
            return False

        self._base_image = image
        self._layer.reset(image.width(), image.height())
        self._mapper.sync_layer()
        self._update_display_rect()

        logger.info(f"Loaded base image {image.width()}x{image.height()}")
        self._event_bus.image_loaded.emit(image.width(), image.height())
        self._emit_sketch_state()
        self.image_changed.emit()
        self.update()
        return True

    def display_rect(self) -> QRectF:
        """Where the photo is drawn inside the widget."""
        if not self.has_image():
            return QRectF()
        return fit_rect(self._base_image.width(), self._base_image.height(),
                        self.width(), self.height())

    def _update_display_rect(self):
        self._mapper.set_display_rect(self.display_rect())

    # ==================== Tools ====================

    def set_tool(self, tool: DrawingTool):
        """Set the current drawing tool."""
        if tool == self._mapper.tool:
            return
        if self._mapper.end_stroke() is not None:
            self._on_stroke_finished()
        self._mapper.set_tool(tool)
        self.setCursor(self._get_tool_cursor(tool))
        self._event_bus.tool_changed.emit(tool)

    def set_brush(self, color: Optional[str] = None, width: Optional[int] = None,
                  opacity: Optional[float] = None):
        self._mapper.set_brush(color=color, width=width, opacity=opacity)
        self._event_bus.brush_changed.emit(self._mapper.brush)

    def _get_tool_cursor(self, tool: DrawingTool) -> QCursor:
        """Get cursor for tool."""
        if tool == DrawingTool.EYEDROPPER:
            return QCursor(Qt.CursorShape.PointingHandCursor)
        return QCursor(Qt.CursorShape.CrossCursor)

    # ==================== History ====================

    def undo(self):
        """Revert the last stroke (or clear when no history is left)."""
        self._mapper.end_stroke()
        self._layer.undo()
        self._mapper.sync_layer()
        self._emit_sketch_state()
        self.update()

    def clear(self):
        """Erase the sketch and its history."""
        self._mapper.end_stroke()
        self._layer.clear()
        self._mapper.sync_layer()
        self._emit_sketch_state()
        self.update()

    def _emit_sketch_state(self):
        self._event_bus.set_has_ink(self._mapper.has_ink)
        self._event_bus.history_changed.emit(self._layer.snapshot_count)

    def _on_stroke_finished(self):
        self._emit_sketch_state()
        self.stroke_finished.emit()

    # ==================== Qt Events ====================

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._update_display_rect()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.BACKGROUND_COLOR)
        if self.has_image():
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            target = self.display_rect()
            painter.drawImage(target, self._base_image)
            painter.drawImage(target, self._layer.image)
        painter.end()

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton or not self.has_image():
            super().mousePressEvent(event)
            return

        self._update_display_rect()
        tool_before = self._mapper.tool
        if self._mapper.pointer_down(event.position()):
            if self._mapper.tool != tool_before:
                # Eyedropper picked a color and handed back to the brush
                self.setCursor(self._get_tool_cursor(self._mapper.tool))
                self._event_bus.brush_changed.emit(self._mapper.brush)
                self._event_bus.tool_changed.emit(self._mapper.tool)
            self.update()
        event.accept()

    def mouseMoveEvent(self, event):
        if self._mapper.pointer_move(event.position()):
            self.update()
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton and self._mapper.pointer_up() is not None:
            self._on_stroke_finished()
            self.update()
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        """End any stroke when the pointer leaves the canvas."""
        if self._mapper.pointer_leave() is not None:
            self._on_stroke_finished()
            self.update()
        super().leaveEvent(event)

    def event(self, event):
        if event.type() == QEvent.Type.TouchCancel:
            if self._mapper.pointer_cancel() is not None:
                self._on_stroke_finished()
                self.update()
            return True
        return super().event(event)


__all__ = ['SketchCanvas']
