"""Collaborator services for Playful Environment Designer"""

from dataclasses import dataclass

from ..config import ServiceSettings
from .http_client import ServiceError, ServiceErrorKind
from .prompt_service import PromptSuggestionService
from .gemini_client import GeminiClient
from .describe_service import ImageDescriptionService
from .concept_service import ConceptImageService, GeneratedImage
from .scoring_service import InterventionScorer, ScoreResult
from .geocode_service import ReverseGeocoder, GeocodeResult
from .request_worker import RequestGate, ServiceTask


@dataclass
class CollaboratorServices:
    """The set of external clients the application talks to."""
    suggestions: PromptSuggestionService
    descriptions: ImageDescriptionService
    concepts: ConceptImageService
    interventions: InterventionScorer
    geocoder: ReverseGeocoder

    @classmethod
    def from_settings(cls, settings: ServiceSettings) -> 'CollaboratorServices':
        return cls(
            suggestions=PromptSuggestionService(settings.openai_api_key),
            descriptions=ImageDescriptionService(
                GeminiClient(settings.gemini_api_key, settings.gemini_vision_model)
            ),
            concepts=ConceptImageService(
                GeminiClient(settings.gemini_api_key, settings.gemini_image_model)
            ),
            interventions=InterventionScorer(
                settings.airtable_api_key,
                settings.airtable_base_id,
                settings.airtable_table_id,
                settings.airtable_keyword_fields,
                settings.airtable_location_fields,
            ),
            geocoder=ReverseGeocoder(settings.nominatim_base_url, settings.nominatim_user_agent),
        )


__all__ = [
    'CollaboratorServices',
    'ServiceError',
    'ServiceErrorKind',
    'PromptSuggestionService',
    'GeminiClient',
    'ImageDescriptionService',
    'ConceptImageService',
    'GeneratedImage',
    'InterventionScorer',
    'ScoreResult',
    'ReverseGeocoder',
    'GeocodeResult',
    'RequestGate',
    'ServiceTask',
]
