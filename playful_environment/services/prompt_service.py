"""
Prompt text generator

Asks an OpenAI chat model for a short playful-environment suggestion.
"""

import logging

from ..config import Config
from .http_client import ServiceError, ServiceErrorKind, request_json

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Produce a concise (max 35 words) response about playful environments. "
    "When asked to add or adapt, share an inclusive, nature-forward idea using locally "
    "sourced natural materials, native vegetation, and relevant cultural cues. When asked "
    "to describe a vulnerability, summarise how it appears, who it affects, and how it "
    "relates to play in the scene. Mirror any requested language."
)


def truncate_words(text: str, limit: int) -> str:
    """Keep at most `limit` whitespace-separated words."""
    return ' '.join(text.split()[:limit])


class PromptSuggestionService:
    """
    Client for the text suggestion collaborator.

    Usage:
        service = PromptSuggestionService(api_key)
        text = service.suggest("Add a splash area to this plaza")
    """

    GENERIC_ERROR = "Error generating prompt"

    def __init__(self, api_key: str, model: str = Config.OPENAI_CHAT_MODEL,
                 endpoint: str = Config.OPENAI_CHAT_ENDPOINT,
                 word_limit: int = Config.SUGGESTION_WORD_LIMIT):
        self._api_key = api_key
        self._model = model
        self._endpoint = endpoint
        self._word_limit = word_limit

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def suggest(self, prompt: str) -> str:
        """
        Get a suggestion capped at the word limit.

        Raises:
            ServiceError: on missing key, empty prompt or upstream failure
        """
        if not self._api_key:
            raise ServiceError(ServiceErrorKind.NOT_CONFIGURED,
                               "OPENAI_API_KEY is not configured.")
        if not prompt or not prompt.strip():
            raise ServiceError(ServiceErrorKind.BAD_REQUEST,
                               "Describe what playful features you want to add first.")

        data = request_json(
            self._endpoint,
            payload={
                "model": self._model,
                "temperature": 0.6,
                "max_tokens": 180,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
            error_message=self.GENERIC_ERROR,
        )

        choices = data.get("choices") or [{}]
        text = ((choices[0] or {}).get("message") or {}).get("content") or ""
        text = text.strip()
        if not text:
            logger.error(f"OpenAI returned no content: {data}")
            raise ServiceError(ServiceErrorKind.EMPTY_RESPONSE,
                               "OpenAI did not return any text. Please try again.")

        return truncate_words(text, self._word_limit)


__all__ = ['SYSTEM_PROMPT', 'truncate_words', 'PromptSuggestionService']
