"""
Sketch Toolbar Widget

Single-row toolbar for the sketch canvas with:
- Tool selection (brush, eraser, eyedropper)
- Color swatch opening a color dialog
- Brush width and opacity
- Undo/Clear buttons
"""

from typing import Optional, Dict
from PyQt6.QtWidgets import (
    QWidget, QHBoxLayout, QPushButton, QFrame, QButtonGroup,
    QSpinBox, QLabel, QColorDialog, QSlider
)
from PyQt6.QtCore import pyqtSignal, Qt
from PyQt6.QtGui import QColor

from ..config import Config
from ..core.stroke_engine import BrushSettings, DrawingTool
from ..events.event_bus import EventBus, get_event_bus


class SketchToolbar(QWidget):
    """Single-row toolbar for the sketch tools."""

    # Signals
    tool_changed = pyqtSignal(object)  # DrawingTool
    color_changed = pyqtSignal(str)  # '#rrggbb'
    brush_size_changed = pyqtSignal(int)
    opacity_changed = pyqtSignal(float)  # 0.0-1.0
    undo_clicked = pyqtSignal()
    clear_clicked = pyqtSignal()

    # Tool definitions: (label, DrawingTool, tooltip, shortcut)
    TOOLS = [
        ("Brush", DrawingTool.BRUSH, "Brush (B)", "B"),
        ("Eraser", DrawingTool.ERASER, "Eraser (E)", "E"),
        ("Pick", DrawingTool.EYEDROPPER, "Pick a color from the sketch (I)", "I"),
    ]

    def __init__(self, parent: Optional[QWidget] = None, event_bus: Optional[EventBus] = None):
        super().__init__(parent)
        self._event_bus = event_bus or get_event_bus()
        self._tool_buttons: Dict[DrawingTool, QPushButton] = {}
        self._current_tool = DrawingTool.BRUSH
        self._color = Config.DEFAULT_BRUSH_COLOR
        self._has_ink = False
        self._history = 0

        self._setup_ui()
        self._connect_signals()

        self._tool_buttons[DrawingTool.BRUSH].setChecked(True)
        self._update_action_buttons()

    def _setup_ui(self):
        """Build the single-row toolbar UI."""
        self.setFixedHeight(40)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        self._tool_btn_style = """
            QPushButton { background: #2d2d2d; border: 1px solid #444; border-radius: 3px;
                          color: #e0e0e0; padding: 0 8px; }
            QPushButton:hover { background: #3a3a3a; border-color: #555; }
            QPushButton:checked { background: #FF5722; border-color: #FF5722; }
            QPushButton:disabled { background: #252525; border-color: #333; color: #666; }
        """

        # Tool button group (exclusive selection)
        self._tool_group = QButtonGroup(self)
        self._tool_group.setExclusive(True)

        for label, tool, tooltip, shortcut in self.TOOLS:
            btn = self._create_button(label, tooltip, checkable=True)
            btn.setShortcut(shortcut)
            self._tool_group.addButton(btn)
            self._tool_buttons[tool] = btn
            layout.addWidget(btn)

        layout.addWidget(self._create_separator())

        # Color swatch
        self._color_btn = QPushButton()
        self._color_btn.setFixedSize(28, 28)
        self._color_btn.setToolTip("Brush color")
        self._update_color_swatch()
        layout.addWidget(self._color_btn)

        layout.addWidget(self._create_separator())

        # ===== Brush Size Section =====
        layout.addWidget(QLabel("Size"))
        self._size_spin = QSpinBox()
        self._size_spin.setRange(Config.MIN_BRUSH_WIDTH, Config.MAX_BRUSH_WIDTH)
        self._size_spin.setValue(Config.DEFAULT_BRUSH_WIDTH)
        self._size_spin.setToolTip(f"Brush width in image pixels "
                                   f"({Config.MIN_BRUSH_WIDTH}-{Config.MAX_BRUSH_WIDTH})")
        layout.addWidget(self._size_spin)

        layout.addWidget(self._create_separator())

        # ===== Opacity Slider Section =====
        layout.addWidget(QLabel("Opacity"))
        self._opacity_slider = QSlider(Qt.Orientation.Horizontal)
        self._opacity_slider.setRange(0, 100)
        self._opacity_slider.setValue(int(round(Config.DEFAULT_BRUSH_OPACITY * 100)))
        self._opacity_slider.setFixedWidth(80)
        self._opacity_slider.setToolTip("Opacity (0-100%)")
        layout.addWidget(self._opacity_slider)

        self._opacity_label = QLabel(f"{self._opacity_slider.value()}%")
        self._opacity_label.setFixedWidth(36)
        layout.addWidget(self._opacity_label)

        layout.addWidget(self._create_separator())

        self._undo_btn = self._create_button("Undo", "Undo last stroke (Ctrl+Z)")
        layout.addWidget(self._undo_btn)

        self._clear_btn = self._create_button("Clear", "Clear the sketch")
        self._clear_btn.setStyleSheet(self._tool_btn_style.replace("#FF5722", "#f44336"))
        layout.addWidget(self._clear_btn)

        layout.addStretch()

    def _create_button(self, label: str, tooltip: str, checkable: bool = False) -> QPushButton:
        btn = QPushButton(label)
        btn.setFixedHeight(28)
        btn.setCheckable(checkable)
        btn.setToolTip(tooltip)
        btn.setStyleSheet(self._tool_btn_style)
        return btn

    def _create_separator(self) -> QFrame:
        """Create a vertical separator."""
        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.VLine)
        sep.setStyleSheet("background: #444; max-width: 1px;")
        return sep

    def _connect_signals(self):
        """Connect internal and event bus signals."""
        for tool, btn in self._tool_buttons.items():
            btn.clicked.connect(lambda checked, t=tool: self._on_tool_clicked(t))

        self._color_btn.clicked.connect(self._pick_color)
        self._size_spin.valueChanged.connect(self.brush_size_changed.emit)
        self._opacity_slider.valueChanged.connect(self._on_opacity_changed)
        self._undo_btn.clicked.connect(self.undo_clicked.emit)
        self._clear_btn.clicked.connect(self.clear_clicked.emit)

        self._event_bus.tool_changed.connect(self.set_tool)
        self._event_bus.brush_changed.connect(self.set_brush)
        self._event_bus.ink_changed.connect(self._on_ink_changed)
        self._event_bus.history_changed.connect(self._on_history_changed)

    # ==================== Handlers ====================

    def _on_tool_clicked(self, tool: DrawingTool):
        self._current_tool = tool
        self.tool_changed.emit(tool)

    def _on_opacity_changed(self, value: int):
        self._opacity_label.setText(f"{value}%")
        self.opacity_changed.emit(value / 100.0)

    def _pick_color(self):
        color = QColorDialog.getColor(QColor(self._color), self, "Brush Color")
        if color.isValid():
            self.set_color(color.name())
            self.color_changed.emit(self._color)

    def _on_ink_changed(self, has_ink: bool):
        self._has_ink = has_ink
        self._update_action_buttons()

    def _on_history_changed(self, count: int):
        self._history = count
        self._update_action_buttons()

    def _update_action_buttons(self):
        self._undo_btn.setEnabled(self._has_ink or self._history > 0)
        self._clear_btn.setEnabled(self._has_ink)

    def _update_color_swatch(self):
        self._color_btn.setStyleSheet(
            f"background-color: {self._color}; border: 1px solid #555; border-radius: 3px;"
        )

    # ==================== PUBLIC API ====================

    @property
    def current_tool(self) -> DrawingTool:
        return self._current_tool

    @property
    def current_color(self) -> str:
        return self._color

    @property
    def brush_size(self) -> int:
        return self._size_spin.value()

    @property
    def opacity(self) -> float:
        return self._opacity_slider.value() / 100.0

    def set_tool(self, tool: DrawingTool):
        """Reflect the active tool without emitting tool_changed."""
        if tool in self._tool_buttons:
            self._tool_buttons[tool].setChecked(True)
            self._current_tool = tool

    def set_color(self, color: str):
        self._color = color
        self._update_color_swatch()

    def set_brush(self, brush: BrushSettings):
        """Reflect brush settings (e.g. after an eyedropper pick)."""
        self.set_color(brush.color)
        for widget, value in ((self._size_spin, brush.width),
                              (self._opacity_slider, int(round(brush.opacity * 100)))):
            widget.blockSignals(True)
            widget.setValue(value)
            widget.blockSignals(False)
        self._opacity_label.setText(f"{self._opacity_slider.value()}%")


__all__ = ['SketchToolbar']
