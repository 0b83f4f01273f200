"""UI Widgets for Playful Environment Designer"""

from .main_window import MainWindow
from .sketch_canvas import SketchCanvas
from .sketch_toolbar import SketchToolbar

__all__ = [
    'MainWindow',
    'SketchCanvas',
    'SketchToolbar',
]
