"""
Minimal Gemini generateContent client shared by the describer and the
concept generator.
"""

import re
from typing import Any, Dict, List, Optional

from ..config import Config
from ..utils.image_utils import parse_data_url
from .http_client import ServiceError, ServiceErrorKind, build_url, request_json


def inline_image_part(data_url: str) -> Dict[str, Any]:
    """
    Convert a data URL into an inline_data request part.

    Raises:
        ServiceError: BAD_REQUEST if the string is not a base64 data URL
    """
    parsed = parse_data_url(data_url)
    if parsed is None:
        raise ServiceError(ServiceErrorKind.BAD_REQUEST, "Image data must be a base64 data URL.")
    mime_type, data = parsed
    return {"inline_data": {"mime_type": mime_type, "data": data}}


def _inline_data(part: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    # REST responses use camelCase, older samples use snake_case
    inline = part.get("inline_data") or part.get("inlineData")
    return inline if isinstance(inline, dict) else None


def pick_candidate(response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """First candidate that finished normally, else the first candidate."""
    candidates = response.get("candidates") or []
    for candidate in candidates:
        if (candidate or {}).get("finishReason") in ("STOP", "MAX_TOKENS"):
            return candidate
    return candidates[0] if candidates else None


def candidate_parts(candidate: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not candidate:
        return []
    parts = (candidate.get("content") or {}).get("parts") or []
    return [part for part in parts if isinstance(part, dict)]


def pick_image_part(candidate: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    """
    Find the first image in a candidate.

    Returns:
        {"data": base64, "mime_type": str} or None
    """
    for part in candidate_parts(candidate):
        inline = _inline_data(part)
        if not inline or not isinstance(inline.get("data"), str) or not inline["data"]:
            continue
        mime_type = inline.get("mime_type") or inline.get("mimeType") or ""
        if re.match(r'^image/', mime_type):
            return {"data": inline["data"], "mime_type": mime_type}
    return None


def pick_text(candidate: Optional[Dict[str, Any]]) -> str:
    """Text of the first text part in a candidate, or ''."""
    for part in candidate_parts(candidate):
        if isinstance(part.get("text"), str):
            return part["text"]
    return ""


class GeminiClient:
    """Sends generateContent requests for one model."""

    def __init__(self, api_key: str, model: str,
                 endpoint_template: str = Config.GEMINI_ENDPOINT_TEMPLATE):
        self._api_key = api_key
        self._model = model
        self._endpoint_template = endpoint_template

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def require_key(self):
        if not self._api_key:
            raise ServiceError(ServiceErrorKind.NOT_CONFIGURED, "GEMINI_API_KEY is not configured.")

    def generate(self, parts: List[Dict[str, Any]], generation_config: Dict[str, Any],
                 error_message: str) -> Dict[str, Any]:
        """Send one user turn and return the decoded response."""
        self.require_key()
        url = build_url(self._endpoint_template.format(model=self._model), {"key": self._api_key})
        return request_json(
            url,
            payload={
                "contents": [{"role": "user", "parts": parts}],
                "generationConfig": generation_config,
            },
            error_message=error_message,
        )


__all__ = [
    'inline_image_part',
    'pick_candidate',
    'pick_image_part',
    'pick_text',
    'GeminiClient',
]
