"""
Image describer

Asks a Gemini vision model for a short factual description of the photo.
"""

import logging
from typing import Optional

from .gemini_client import GeminiClient, inline_image_part, pick_candidate, pick_text
from .http_client import ServiceError, ServiceErrorKind

logger = logging.getLogger(__name__)

DEFAULT_DESCRIBE_PROMPT = (
    "Provide two short sentences describing what is happening in this photo, including "
    "notable landforms, vegetation, weather, and people. Keep it factual."
)


class ImageDescriptionService:
    """Client for the image description collaborator."""

    def __init__(self, client: GeminiClient):
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client.is_configured

    def describe(self, image_data_url: str, prompt: Optional[str] = None) -> str:
        """
        Describe an image given as a data URL (ideally a downscaled preview).

        Raises:
            ServiceError: on missing key, bad image data or upstream failure
        """
        self._client.require_key()
        if not image_data_url:
            raise ServiceError(ServiceErrorKind.BAD_REQUEST, "imageData is required.")

        parts = [
            {"text": (prompt or '').strip() or DEFAULT_DESCRIBE_PROMPT},
            inline_image_part(image_data_url),
        ]
        data = self._client.generate(
            parts,
            {"temperature": 0.15, "topK": 32, "topP": 0.8, "maxOutputTokens": 200},
            error_message="Unable to describe the image. Please try again.",
        )

        text = pick_text(pick_candidate(data)).strip()
        if not text:
            logger.error(f"Gemini describe-image returned no text: {data}")
            raise ServiceError(ServiceErrorKind.EMPTY_RESPONSE,
                               "Gemini did not return a usable description.")
        return text


__all__ = ['DEFAULT_DESCRIBE_PROMPT', 'ImageDescriptionService']
