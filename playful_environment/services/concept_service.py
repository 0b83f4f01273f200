"""
Image concept generator

Sends the prompt plus the composite (or base image and mask) to a Gemini
image model and returns the generated concept image.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from PyQt6.QtGui import QImage

from ..core.compositor import CompositeMode, ConceptPayload
from ..utils.image_utils import decode_image_bytes
from .gemini_client import GeminiClient, inline_image_part, pick_candidate, pick_image_part
from .http_client import ServiceError, ServiceErrorKind

logger = logging.getLogger(__name__)

CONCEPT_INSTRUCTION = (
    "You help urban designers imagine inclusive, climate-adaptive play spaces. Keep existing "
    "surroundings recognizable while translating the instruction into a polished concept rendering."
)
COMPOSITE_HINT = "Use this composite sketch as a reference and enhance it realistically."
MASK_HINT = "Respect the mask: white pixels mark the areas to modify. Leave black areas unchanged."


@dataclass(frozen=True)
class GeneratedImage:
    """A concept image returned by the generator."""
    image_base64: str
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.image_base64}"

    def to_qimage(self) -> Optional[QImage]:
        """Decode the image, or None if the payload is unreadable."""
        try:
            raw = base64.b64decode(self.image_base64, validate=True)
        except (binascii.Error, ValueError):
            return None
        return decode_image_bytes(raw)


class ConceptImageService:
    """Client for the concept image collaborator."""

    def __init__(self, client: GeminiClient):
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client.is_configured

    def build_parts(self, prompt: str, payload: ConceptPayload) -> List[Dict[str, Any]]:
        """
        Request parts for a prompt and payload.

        Raises:
            ServiceError: BAD_REQUEST if the prompt or the mode's images are missing
        """
        if not prompt or not isinstance(prompt, str) or not prompt.strip():
            raise ServiceError(ServiceErrorKind.BAD_REQUEST,
                               "A prompt describing the concept is required.")

        parts: List[Dict[str, Any]] = [{"text": f"{CONCEPT_INSTRUCTION}\nInstruction: {prompt.strip()}"}]

        if payload.mode == CompositeMode.COMPOSITE:
            if not payload.image_data:
                raise ServiceError(ServiceErrorKind.BAD_REQUEST, "Composite mode requires imageData.")
            parts.append(inline_image_part(payload.image_data))
            parts.append({"text": COMPOSITE_HINT})
        else:
            if not payload.base_image_data or not payload.mask_data:
                raise ServiceError(ServiceErrorKind.BAD_REQUEST,
                                   "Inpainting mode requires baseImageData and maskData.")
            parts.append(inline_image_part(payload.base_image_data))
            parts.append(inline_image_part(payload.mask_data))
            parts.append({"text": MASK_HINT})
        return parts

    def generate(self, prompt: str, payload: ConceptPayload) -> GeneratedImage:
        """
        Generate a concept image.

        Raises:
            ServiceError: on missing key, bad input or upstream failure
        """
        self._client.require_key()
        parts = self.build_parts(prompt, payload)

        logger.info(f"Requesting {payload.mode.value} concept from {self._client.model}")
        data = self._client.generate(
            parts,
            {"temperature": 0.65, "topP": 0.8, "topK": 32, "maxOutputTokens": 2048},
            error_message="Gemini could not generate the concept image.",
        )

        image_part = pick_image_part(pick_candidate(data))
        if image_part is None:
            logger.error("Gemini returned no image")
            raise ServiceError(ServiceErrorKind.EMPTY_RESPONSE,
                               "Gemini did not return an image. Please try again.")

        return GeneratedImage(image_base64=image_part["data"],
                              mime_type=image_part["mime_type"] or "image/png")


__all__ = ['CONCEPT_INSTRUCTION', 'GeneratedImage', 'ConceptImageService']
