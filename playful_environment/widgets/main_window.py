"""
MainWindow - Main application window

Pattern: QMainWindow with splitter layout

Layout:
    +------------------------------------------+
    |  SketchToolbar               |           |
    +------------------------------+  Prompt   |
    |                              |  form     |
    |  SketchCanvas                |           |
    |                              |  Concept  |
    |                              |  result   |
    +------------------------------------------+
    |  StatusBar                               |
    +------------------------------------------+
"""

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QSplitter,
    QStatusBar, QMessageBox, QFileDialog, QPushButton, QPlainTextEdit,
    QLineEdit, QLabel, QComboBox, QGroupBox, QSizePolicy
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QCloseEvent, QImage, QKeySequence, QPixmap

from ..config import Config, FeatureFlags, ServiceSettings
from ..core.compositor import CompositeMode
from ..core.photo_metadata import read_gps_coordinates
from ..core.prompt_builder import PromptFields
from ..core.session_export import default_export_name, export_session_csv
from ..events.event_bus import EventBus, get_event_bus
from ..services import CollaboratorServices, GeneratedImage, ScoreResult
from ..utils.image_utils import load_image_as_qimage
from .controllers import GenerationController
from .sketch_canvas import SketchCanvas
from .sketch_toolbar import SketchToolbar

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.webp *.bmp)"


class MainWindow(QMainWindow):
    """
    Main application window

    Features:
    - Photo upload with GPS lookup and automatic description
    - Sketch canvas with brush, eraser, eyedropper and undo
    - Prompt form, idea suggestions and intervention scoring
    - Concept generation in composite or inpainting mode
    - Session export to CSV
    """

    RESULT_PLACEHOLDER = "The generated concept appears here"

    def __init__(self, flags: Optional[FeatureFlags] = None,
                 services: Optional[CollaboratorServices] = None,
                 event_bus: Optional[EventBus] = None, thread_pool=None, parent=None):
        super().__init__(parent)

        # Services and event bus (injectable for testing)
        self._flags = flags or FeatureFlags()
        self._event_bus = event_bus or get_event_bus()
        self._services = services or CollaboratorServices.from_settings(ServiceSettings.from_environment())
        self._controller = GenerationController(
            self._services, self._flags, event_bus=self._event_bus, thread_pool=thread_pool, parent=self
        )
        self._image_path: Optional[Path] = None
        self._concept_image: Optional[QImage] = None

        self._setup_window()
        self._create_widgets()
        self._create_layout()
        self._create_actions()
        self._connect_signals()
        self._update_actions()

    # ==================== Setup ====================

    def _setup_window(self):
        """Configure window properties"""
        self.setWindowTitle(f"{Config.APP_NAME} {Config.APP_VERSION}")
        self.setGeometry(100, 100, Config.DEFAULT_WINDOW_WIDTH, Config.DEFAULT_WINDOW_HEIGHT)

    def _create_widgets(self):
        """Create UI widgets"""
        self._toolbar = SketchToolbar(event_bus=self._event_bus)
        self._canvas = SketchCanvas(event_bus=self._event_bus)

        self._upload_btn = QPushButton("Upload Photo...")
        self._location_label = QLabel("No location")
        self._location_label.setWordWrap(True)

        self._site_edit = self._create_text_edit("What is this place like?")
        self._description_edit = self._create_text_edit("Photo description (filled in automatically)")
        self._ideas_edit = self._create_text_edit("Which playful features do you want to add?")
        self._vulnerability_edit = self._create_text_edit("Which climate vulnerability should it address?")
        self._language_edit = QLineEdit()
        self._language_edit.setPlaceholderText("Response language (optional)")

        self._suggest_btn = QPushButton("Suggest Idea")
        self._vulnerability_btn = QPushButton("Describe Vulnerability")
        self._describe_btn = QPushButton("Describe Photo")
        self._score_btn = QPushButton("Score Interventions")

        self._mode_combo = QComboBox()
        self._mode_combo.addItem("Composite", CompositeMode.COMPOSITE)
        if self._flags.inpainting_enabled:
            self._mode_combo.addItem("Inpainting (change sketched area only)", CompositeMode.INPAINTING)

        self._generate_btn = QPushButton("Generate Concept")
        self._generate_btn.setVisible(self._flags.image_generation_enabled)
        self._mode_combo.setVisible(self._flags.image_generation_enabled)

        self._result_label = QLabel(self.RESULT_PLACEHOLDER)
        self._result_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._result_label.setMinimumHeight(200)
        self._result_label.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._result_label.setStyleSheet("background: #1e1e1e; color: #888; border: 1px solid #333;")

        self._save_concept_btn = QPushButton("Save Concept...")
        self._export_btn = QPushButton("Export Session CSV...")

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

    def _create_text_edit(self, placeholder: str) -> QPlainTextEdit:
        edit = QPlainTextEdit()
        edit.setPlaceholderText(placeholder)
        edit.setFixedHeight(64)
        return edit

    def _create_layout(self):
        """Create window layout"""
        # Left: toolbar above canvas
        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.addWidget(self._toolbar)
        left_layout.addWidget(self._canvas, 1)

        # Right: form and result
        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(8, 0, 0, 0)

        photo_row = QHBoxLayout()
        photo_row.addWidget(self._upload_btn)
        photo_row.addWidget(self._location_label, 1)
        right_layout.addLayout(photo_row)

        form_group = QGroupBox("Site")
        form = QFormLayout(form_group)
        form.addRow("Place", self._site_edit)
        form.addRow("Photo", self._description_edit)
        form.addRow("Play", self._ideas_edit)
        form.addRow("Climate", self._vulnerability_edit)
        form.addRow("Language", self._language_edit)
        right_layout.addWidget(form_group)

        assist_row = QHBoxLayout()
        for btn in (self._suggest_btn, self._vulnerability_btn, self._describe_btn, self._score_btn):
            assist_row.addWidget(btn)
        right_layout.addLayout(assist_row)

        generate_row = QHBoxLayout()
        generate_row.addWidget(self._mode_combo, 1)
        generate_row.addWidget(self._generate_btn)
        right_layout.addLayout(generate_row)

        right_layout.addWidget(self._result_label, 1)

        output_row = QHBoxLayout()
        output_row.addWidget(self._save_concept_btn)
        output_row.addWidget(self._export_btn)
        right_layout.addLayout(output_row)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(left)
        splitter.addWidget(right)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)

        self.setCentralWidget(splitter)

    def _create_actions(self):
        """Menu bar and keyboard shortcuts"""
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open Photo...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._on_upload_clicked)
        file_menu.addAction(open_action)

        export_action = QAction("&Export Session CSV...", self)
        export_action.triggered.connect(self._on_export_clicked)
        file_menu.addAction(export_action)

        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        edit_menu = self.menuBar().addMenu("&Edit")

        undo_action = QAction("&Undo Stroke", self)
        undo_action.setShortcut(QKeySequence.StandardKey.Undo)
        undo_action.triggered.connect(self._canvas.undo)
        edit_menu.addAction(undo_action)

        clear_action = QAction("&Clear Sketch", self)
        clear_action.triggered.connect(self._canvas.clear)
        edit_menu.addAction(clear_action)

    def _connect_signals(self):
        """Connect signals between components"""
        # Toolbar -> canvas
        self._toolbar.tool_changed.connect(self._canvas.set_tool)
        self._toolbar.color_changed.connect(lambda color: self._canvas.set_brush(color=color))
        self._toolbar.brush_size_changed.connect(lambda width: self._canvas.set_brush(width=width))
        self._toolbar.opacity_changed.connect(lambda opacity: self._canvas.set_brush(opacity=opacity))
        self._toolbar.undo_clicked.connect(self._canvas.undo)
        self._toolbar.clear_clicked.connect(self._canvas.clear)

        # Buttons
        self._upload_btn.clicked.connect(self._on_upload_clicked)
        self._suggest_btn.clicked.connect(lambda: self._controller.request_suggestion(self._collect_fields()))
        self._vulnerability_btn.clicked.connect(
            lambda: self._controller.request_vulnerability(self._collect_fields())
        )
        self._describe_btn.clicked.connect(
            lambda: self._controller.request_description(self._canvas.base_image)
        )
        self._score_btn.clicked.connect(lambda: self._controller.request_score(self._collect_fields()))
        self._generate_btn.clicked.connect(self._on_generate_clicked)
        self._save_concept_btn.clicked.connect(self._on_save_concept_clicked)
        self._export_btn.clicked.connect(self._on_export_clicked)

        # Controller results
        self._controller.suggestion_ready.connect(self._on_suggestion_ready)
        self._controller.vulnerability_ready.connect(self._vulnerability_edit.setPlainText)
        self._controller.description_ready.connect(self._description_edit.setPlainText)
        self._controller.concept_ready.connect(self._on_concept_ready)
        self._controller.score_ready.connect(self._on_score_ready)

        # Event bus
        self._event_bus.status_message.connect(self._status_bar.showMessage)
        self._event_bus.location_changed.connect(self._on_location_changed)
        self._event_bus.loading_started.connect(lambda channel: self._update_actions())
        self._event_bus.loading_finished.connect(lambda channel: self._update_actions())
        self._event_bus.ink_changed.connect(lambda has_ink: self._update_actions())
        self._canvas.image_changed.connect(self._update_actions)

    # ==================== Form ====================

    def _collect_fields(self) -> PromptFields:
        return PromptFields(
            site_description=self._site_edit.toPlainText(),
            play_ideas=self._ideas_edit.toPlainText(),
            vulnerability=self._vulnerability_edit.toPlainText(),
            location=self._event_bus.get_location(),
            image_description=self._description_edit.toPlainText(),
            language=self._language_edit.text(),
        )

    def _update_actions(self):
        """Enable buttons according to image, ink and loading state."""
        has_image = self._canvas.has_image()
        busy = self._event_bus.is_loading
        self._describe_btn.setEnabled(has_image and not busy(GenerationController.CHANNEL_DESCRIBE))
        self._generate_btn.setEnabled(has_image and not busy(GenerationController.CHANNEL_CONCEPT))
        self._suggest_btn.setEnabled(not busy(GenerationController.CHANNEL_SUGGEST))
        self._vulnerability_btn.setEnabled(not busy(GenerationController.CHANNEL_VULNERABILITY))
        self._score_btn.setEnabled(not busy(GenerationController.CHANNEL_SCORE))
        self._save_concept_btn.setEnabled(self._concept_image is not None)
        self._export_btn.setEnabled(bool(self._controller.session_records))

    # ==================== Photo ====================

    def _on_upload_clicked(self):
        path, _ = QFileDialog.getOpenFileName(self, "Upload Photo", str(Path.home()), IMAGE_FILTER)
        if path:
            self.load_photo(Path(path))

    def load_photo(self, path: Path) -> bool:
        """
        Start a new session on a photo file.

        Args:
            path: Image file

        Returns:
            True if the photo was loaded
        """
        image = load_image_as_qimage(path)
        if image is None or image.isNull():
            QMessageBox.warning(self, "Upload Photo", f"Could not read image:\n{path}")
            return False

        self._controller.reset_session_image()
        self._image_path = path
        self._description_edit.clear()
        self._clear_concept()
        self._canvas.load_image(image)
        self._event_bus.show_status(f"Loaded {path.name} ({image.width()}x{image.height()})")

        coordinates = read_gps_coordinates(path)
        if coordinates is not None:
            self._controller.request_location(*coordinates)

        self._controller.request_description(image, automatic=True)
        self._update_actions()
        return True

    def _on_location_changed(self, location: str):
        self._location_label.setText(location or "No location")

    # ==================== Results ====================

    def _on_suggestion_ready(self, text: str):
        self._controller.note_suggestion(text)
        current = self._ideas_edit.toPlainText().strip()
        self._ideas_edit.setPlainText(f"{current}\n{text}" if current else text)

    def _on_score_ready(self, result: ScoreResult):
        self._score_btn.setToolTip(result.summary())

    def _on_generate_clicked(self):
        mode = self._mode_combo.currentData() or CompositeMode.COMPOSITE
        self._controller.request_concept(
            self._canvas.base_image,
            self._canvas.layer.image,
            self._collect_fields(),
            mode=mode,
            has_ink=self._canvas.has_ink(),
        )

    def _on_concept_ready(self, generated: GeneratedImage):
        image = generated.to_qimage()
        if image is None:
            self._event_bus.show_status("The generated image could not be decoded.")
            return

        self._concept_image = image
        self._show_concept()
        self._update_actions()

    def _clear_concept(self):
        self._concept_image = None
        self._result_label.clear()
        self._result_label.setText(self.RESULT_PLACEHOLDER)

    def _show_concept(self):
        if self._concept_image is None:
            return
        pixmap = QPixmap.fromImage(self._concept_image).scaled(
            self._result_label.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self._result_label.setPixmap(pixmap)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._show_concept()

    def _on_save_concept_clicked(self):
        if self._concept_image is None:
            return
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Concept", str(Config.get_export_dir() / "concept.png"), "PNG (*.png)"
        )
        if path and not self._concept_image.save(path, "PNG"):
            QMessageBox.warning(self, "Save Concept", f"Could not save image:\n{path}")

    def _on_export_clicked(self):
        records = self._controller.session_records
        if not records:
            self._event_bus.show_status("Nothing to export yet.")
            return

        path, _ = QFileDialog.getSaveFileName(
            self, "Export Session", str(Config.get_export_dir() / default_export_name()), "CSV (*.csv)"
        )
        if not path:
            return

        try:
            written = export_session_csv(records, Path(path))
        except OSError as e:
            logger.error(f"Session export failed: {e}")
            QMessageBox.warning(self, "Export Session", f"Could not write file:\n{e}")
            return
        self._event_bus.show_status(f"Exported {len(records)} record(s) to {written.name}")

    # ==================== Lifecycle ====================

    @property
    def canvas(self) -> SketchCanvas:
        return self._canvas

    @property
    def controller(self) -> GenerationController:
        return self._controller

    def closeEvent(self, event: QCloseEvent):
        """Drop outstanding requests before closing."""
        self._controller.gate.invalidate()
        logger.info("Main window closed")
        event.accept()


__all__ = ['MainWindow']
