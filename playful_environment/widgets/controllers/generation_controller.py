"""
GenerationController - Dispatches collaborator requests for the MainWindow

Runs every collaborator call on a thread pool and applies results only when
they belong to the latest request of their channel.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import QObject, QThreadPool, pyqtSignal
from PyQt6.QtGui import QImage

from ...config import FeatureFlags
from ...core.compositor import CompositeMode, prepare_concept_payload
from ...core.preview import downscale_data_url
from ...core.prompt_builder import (
    PromptFields,
    build_concept_prompt,
    build_suggestion_prompt,
    build_vulnerability_prompt,
)
from ...core.session_export import SessionRecord
from ...events.event_bus import EventBus, get_event_bus
from ...services import CollaboratorServices, GeneratedImage, GeocodeResult, ScoreResult
from ...services.request_worker import RequestGate, ServiceTask
from ...utils.image_utils import to_data_url

logger = logging.getLogger(__name__)


class GenerationController(QObject):
    """
    Collaborator requests for one editing session.

    Channels:
    - suggest: playful idea text
    - vulnerability: climate vulnerability text
    - describe: photo description
    - concept: generated concept image
    - score: intervention scoring
    - geocode: reverse geocoding of photo GPS
    """

    CHANNEL_SUGGEST = "suggest"
    CHANNEL_VULNERABILITY = "vulnerability"
    CHANNEL_DESCRIBE = "describe"
    CHANNEL_CONCEPT = "concept"
    CHANNEL_SCORE = "score"
    CHANNEL_GEOCODE = "geocode"

    STATUS_TEXT = {
        CHANNEL_SUGGEST: "Thinking of a playful idea...",
        CHANNEL_VULNERABILITY: "Describing the vulnerability...",
        CHANNEL_DESCRIBE: "Describing the photo...",
        CHANNEL_CONCEPT: "Generating concept image...",
        CHANNEL_SCORE: "Scoring interventions...",
        CHANNEL_GEOCODE: "Looking up location...",
    }

    # Signals
    suggestion_ready = pyqtSignal(str)
    vulnerability_ready = pyqtSignal(str)
    description_ready = pyqtSignal(str)
    concept_ready = pyqtSignal(object)  # GeneratedImage
    score_ready = pyqtSignal(object)  # ScoreResult
    location_ready = pyqtSignal(object)  # GeocodeResult
    request_failed = pyqtSignal(str, str)  # channel, message

    def __init__(self, services: CollaboratorServices, flags: FeatureFlags,
                 event_bus: Optional[EventBus] = None, thread_pool=None,
                 parent: Optional[QObject] = None):
        """
        Initialize generation controller.

        Args:
            services: Collaborator clients
            flags: Feature toggles
            event_bus: Event bus for status and loading state
            thread_pool: Object with a start(QRunnable) method (QThreadPool by default)
        """
        super().__init__(parent)
        self._services = services
        self._flags = flags
        self._event_bus = event_bus or get_event_bus()
        self._pool = thread_pool or QThreadPool.globalInstance()
        self._gate = RequestGate()
        self._handlers: Dict[str, Callable[[Any], None]] = {
            self.CHANNEL_SUGGEST: self.suggestion_ready.emit,
            self.CHANNEL_VULNERABILITY: self.vulnerability_ready.emit,
            self.CHANNEL_DESCRIBE: self.description_ready.emit,
            self.CHANNEL_CONCEPT: self._on_concept_ready,
            self.CHANNEL_SCORE: self._on_score_ready,
            self.CHANNEL_GEOCODE: self._on_location_ready,
        }

        # Session state
        self._records: List[SessionRecord] = []
        self._pending_concept: Optional[Tuple[str, CompositeMode, PromptFields]] = None
        self._coordinates: Optional[Tuple[float, float]] = None
        self._location: Optional[GeocodeResult] = None
        self._last_score: Optional[ScoreResult] = None
        self._last_suggestion = ''

    # ==================== Properties ====================

    @property
    def flags(self) -> FeatureFlags:
        return self._flags

    @property
    def gate(self) -> RequestGate:
        return self._gate

    @property
    def session_records(self) -> List[SessionRecord]:
        return list(self._records)

    @property
    def location(self) -> Optional[GeocodeResult]:
        return self._location

    def inpainting_available(self) -> bool:
        return self._flags.inpainting_enabled

    # ==================== Requests ====================

    def request_suggestion(self, fields: PromptFields) -> bool:
        """Ask for a playful idea for the site."""
        prompt = build_suggestion_prompt(fields.site_description, fields.play_ideas, fields.language)
        if not prompt:
            self._event_bus.show_status("Describe the site or the playful features you want first.")
            return False
        self._dispatch(self.CHANNEL_SUGGEST, self._services.suggestions.suggest, prompt)
        return True

    def request_vulnerability(self, fields: PromptFields) -> bool:
        """Ask for a description of the site's climate vulnerability."""
        prompt = build_vulnerability_prompt(fields.site_description, fields.vulnerability,
                                            fields.language)
        if not prompt:
            self._event_bus.show_status("Name a climate vulnerability first.")
            return False
        self._dispatch(self.CHANNEL_VULNERABILITY, self._services.suggestions.suggest, prompt)
        return True

    def request_description(self, image: QImage, automatic: bool = False) -> bool:
        """
        Describe the photo from a downscaled preview.

        Args:
            image: Base photo
            automatic: True when triggered by an upload (honors the auto-description flag)
        """
        if automatic and not self._flags.auto_description_enabled:
            return False
        if image.isNull():
            return False

        try:
            preview = downscale_data_url(to_data_url(image, "PNG"))
        except ValueError as e:
            logger.warning(f"Could not encode photo for description: {e}")
            self._event_bus.show_status("Could not prepare the photo for description.")
            return False

        self._dispatch(self.CHANNEL_DESCRIBE, self._services.descriptions.describe, preview)
        return True

    def request_concept(self, base: QImage, sketch: QImage, fields: PromptFields,
                        mode: CompositeMode = CompositeMode.COMPOSITE, has_ink: bool = True) -> bool:
        """
        Generate a concept image from the photo, the sketch and the form fields.

        Inpainting needs the flag and some ink; otherwise the request falls
        back to composite mode.
        """
        if not self._flags.image_generation_enabled:
            self._event_bus.show_status("Image generation is disabled.")
            return False
        if base.isNull():
            self._event_bus.show_status("Upload a photo first.")
            return False

        if mode == CompositeMode.INPAINTING and not (self._flags.inpainting_enabled and has_ink):
            logger.info("Inpainting unavailable, using composite mode")
            mode = CompositeMode.COMPOSITE

        prompt = build_concept_prompt(fields, mode)
        if not prompt:
            self._event_bus.show_status("Describe the site, the playful features or a vulnerability first.")
            return False

        try:
            payload = prepare_concept_payload(base, sketch, mode)
        except ValueError as e:
            logger.warning(f"Could not build concept payload: {e}")
            self._event_bus.show_status("Could not prepare the images for generation.")
            return False

        self._pending_concept = (prompt, mode, fields)
        self._dispatch(self.CHANNEL_CONCEPT, self._services.concepts.generate, prompt, payload)
        return True

    def request_score(self, fields: PromptFields) -> bool:
        """Score the current ideas against the intervention catalogue."""
        prompt = ' '.join(part for part in (fields.play_ideas, fields.vulnerability,
                                            fields.site_description) if part.strip())
        if not prompt and not fields.location.strip():
            self._event_bus.show_status("Describe the playful features before scoring.")
            return False
        self._dispatch(self.CHANNEL_SCORE, self._services.interventions.score, prompt, fields.location)
        return True

    def request_location(self, lat: float, lon: float) -> bool:
        """Resolve photo GPS coordinates to a place name."""
        self._coordinates = (lat, lon)
        self._dispatch(self.CHANNEL_GEOCODE, self._services.geocoder.reverse, lat, lon)
        return True

    def reset_session_image(self):
        """
        Forget everything tied to the previous photo.

        Outstanding responses are dropped when they arrive.
        """
        self._gate.invalidate()
        for channel in self.STATUS_TEXT:
            if self._event_bus.is_loading(channel):
                self._event_bus.finish_loading(channel)
        self._pending_concept = None
        self._coordinates = None
        self._location = None
        self._last_score = None
        self._last_suggestion = ''
        self._event_bus.set_location('')

    def note_suggestion(self, text: str):
        """Remember the suggestion text that was accepted into the form."""
        self._last_suggestion = text

    # ==================== Dispatch ====================

    def _dispatch(self, channel: str, fn: Callable[..., Any], *args) -> int:
        token = self._gate.issue(channel)
        task = ServiceTask(channel, token, fn, *args)
        task.signals.succeeded.connect(self._on_task_succeeded)
        task.signals.failed.connect(self._on_task_failed)

        self._event_bus.start_loading(channel)
        self._event_bus.show_status(self.STATUS_TEXT[channel])
        logger.debug(f"Dispatching {channel} request (token {token})")
        self._pool.start(task)
        return token

    def _on_task_succeeded(self, channel: str, token: int, result: object):
        if not self._gate.complete(channel, token):
            return
        self._event_bus.finish_loading(channel)
        self._event_bus.show_status("Ready")
        self._handlers[channel](result)

    def _on_task_failed(self, channel: str, token: int, message: str):
        if not self._gate.complete(channel, token):
            return
        if channel == self.CHANNEL_CONCEPT:
            self._record_concept(status=f"failed: {message}")
        self._event_bus.finish_loading(channel)
        self._event_bus.show_status(message)
        self.request_failed.emit(channel, message)

    # ==================== Result Handlers ====================

    def _on_concept_ready(self, image: GeneratedImage):
        self._record_concept(status="generated")
        self.concept_ready.emit(image)

    def _on_score_ready(self, result: ScoreResult):
        self._last_score = result
        self._event_bus.show_status(result.summary())
        self.score_ready.emit(result)

    def _on_location_ready(self, result: GeocodeResult):
        self._location = result
        self._event_bus.set_location(result.short_name())
        self.location_ready.emit(result)

    def _record_concept(self, status: str):
        if self._pending_concept is None:
            return
        prompt, mode, fields = self._pending_concept
        self._pending_concept = None

        lat, lon = self._coordinates or (None, None)
        averages = (self._last_score.averages if self._last_score else None) or {}
        self._records.append(SessionRecord(
            prompt=prompt,
            mode=mode.value,
            location=fields.location,
            latitude=lat,
            longitude=lon,
            site_description=fields.site_description,
            image_description=fields.image_description,
            suggestion=self._last_suggestion,
            intervention_matches=self._last_score.matches if self._last_score else 0,
            average_cost=averages.get('cost'),
            average_ease=averages.get('ease'),
            average_effectiveness=averages.get('effectiveness'),
            status=status,
        ))


__all__ = ['GenerationController']
