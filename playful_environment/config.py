"""
Global configuration for Playful Environment Designer

Holds the fixed application constants, the feature flags passed into the
window at startup, and the credentials used by the service clients.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, List, Mapping, Optional


_TRUTHY = ('1', 'true', 'yes', 'on')


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _env_list(env: Mapping[str, str], name: str, default: str) -> List[str]:
    raw = env.get(name) or default
    return [item.strip() for item in raw.split(',') if item.strip()]


class Config:
    """Central configuration class for all application settings"""

    # Application metadata
    APP_NAME: Final[str] = "Playful Environment Designer"
    APP_VERSION: Final[str] = "1.0.0"
    APP_AUTHOR: Final[str] = "Playful Environments"

    # Paths
    APP_ROOT: Final[Path] = Path(__file__).parent

    # Sketch layer
    MAX_UNDO_SNAPSHOTS: Final[int] = 15
    SNAPSHOT_FORMAT: Final[str] = "PNG"

    # Brush defaults
    DEFAULT_BRUSH_COLOR: Final[str] = "#ff5722"
    DEFAULT_BRUSH_WIDTH: Final[int] = 12
    DEFAULT_BRUSH_OPACITY: Final[float] = 0.8
    MIN_BRUSH_WIDTH: Final[int] = 1
    MAX_BRUSH_WIDTH: Final[int] = 120

    # Upload previews
    PREVIEW_MAX_DIMENSION: Final[int] = 1024
    PREVIEW_JPEG_QUALITY: Final[int] = 70  # 0.7 on the 0-1 scale

    # Collaborator endpoints
    OPENAI_CHAT_ENDPOINT: Final[str] = "https://api.openai.com/v1/chat/completions"
    OPENAI_CHAT_MODEL: Final[str] = "gpt-4o-mini"
    GEMINI_ENDPOINT_TEMPLATE: Final[str] = (
        "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    )
    AIRTABLE_ENDPOINT_TEMPLATE: Final[str] = "https://api.airtable.com/v0/{base_id}/{table}"
    DEFAULT_NOMINATIM_URL: Final[str] = "https://nominatim.openstreetmap.org/reverse"
    DEFAULT_NOMINATIM_USER_AGENT: Final[str] = "playful-environment-app/1.0 (mailto:you@example.com)"
    REQUEST_TIMEOUT_SEC: Final[int] = 60

    # Suggestion text is capped at this many words
    SUGGESTION_WORD_LIMIT: Final[int] = 35

    # Window settings
    DEFAULT_WINDOW_WIDTH: Final[int] = 1400
    DEFAULT_WINDOW_HEIGHT: Final[int] = 900

    @classmethod
    def get_user_data_dir(cls) -> Path:
        """
        Get user data directory.

        Uses system AppData/Local (Windows) or .local/share (Linux)
        to ensure settings persist across application updates.
        """
        portable_flag = cls.APP_ROOT.parent / 'portable.txt'
        if portable_flag.exists():
            user_dir = cls.APP_ROOT.parent / 'data'
        elif sys.platform == 'win32':
            base_path = Path(os.environ.get('LOCALAPPDATA', os.path.expanduser('~')))
            user_dir = base_path / 'PlayfulEnvironment'
        elif sys.platform == 'darwin':
            user_dir = Path.home() / 'Library' / 'Application Support' / 'PlayfulEnvironment'
        else:
            user_dir = Path.home() / '.local' / 'share' / 'PlayfulEnvironment'

        user_dir.mkdir(parents=True, exist_ok=True)
        return user_dir

    @classmethod
    def get_log_dir(cls) -> Path:
        """Get the log folder path."""
        return cls.get_user_data_dir() / 'logs'

    @classmethod
    def get_export_dir(cls) -> Path:
        """Get the default folder for CSV session exports."""
        export_dir = cls.get_user_data_dir() / 'exports'
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir


@dataclass(frozen=True)
class FeatureFlags:
    """Feature toggles passed into the main window at startup."""

    auto_description_enabled: bool = True
    image_generation_enabled: bool = True
    inpainting_enabled: bool = False

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> 'FeatureFlags':
        """
        Build flags from environment variables.

        Recognized variables: PLAYFUL_AUTO_DESCRIPTION, PLAYFUL_IMAGE_GENERATION,
        PLAYFUL_INPAINTING. Unset variables keep the dataclass defaults.
        """
        env = os.environ if env is None else env
        return cls(
            auto_description_enabled=_env_flag(env, 'PLAYFUL_AUTO_DESCRIPTION', cls.auto_description_enabled),
            image_generation_enabled=_env_flag(env, 'PLAYFUL_IMAGE_GENERATION', cls.image_generation_enabled),
            inpainting_enabled=_env_flag(env, 'PLAYFUL_INPAINTING', cls.inpainting_enabled),
        )


@dataclass(frozen=True)
class ServiceSettings:
    """Credentials and model names for the collaborator services."""

    openai_api_key: str = ''
    gemini_api_key: str = ''
    gemini_vision_model: str = 'gemini-1.5-flash-latest'
    gemini_image_model: str = 'gemini-2.0-flash-exp'
    airtable_api_key: str = ''
    airtable_base_id: str = ''
    airtable_table_id: str = ''
    airtable_keyword_fields: List[str] = field(
        default_factory=lambda: ['Keywords', 'keywords', 'Tags', 'Focus']
    )
    airtable_location_fields: List[str] = field(
        default_factory=lambda: ['Location', 'Region', 'Country']
    )
    nominatim_base_url: str = Config.DEFAULT_NOMINATIM_URL
    nominatim_user_agent: str = Config.DEFAULT_NOMINATIM_USER_AGENT

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> 'ServiceSettings':
        """Read service settings from environment variables."""
        env = os.environ if env is None else env
        return cls(
            openai_api_key=env.get('OPENAI_API_KEY', ''),
            gemini_api_key=env.get('GEMINI_API_KEY', ''),
            gemini_vision_model=env.get('GEMINI_VISION_MODEL') or cls.gemini_vision_model,
            gemini_image_model=env.get('GEMINI_IMAGE_MODEL') or cls.gemini_image_model,
            airtable_api_key=env.get('AIRTABLE_API_KEY', ''),
            airtable_base_id=env.get('AIRTABLE_BASE_ID', ''),
            airtable_table_id=env.get('AIRTABLE_TABLE_ID') or env.get('AIRTABLE_TABLE_NAME', ''),
            airtable_keyword_fields=_env_list(env, 'AIRTABLE_KEYWORD_FIELDS', 'Keywords,keywords,Tags,Focus'),
            airtable_location_fields=_env_list(env, 'AIRTABLE_LOCATION_FIELDS', 'Location,Region,Country'),
            nominatim_base_url=env.get('NOMINATIM_BASE_URL') or Config.DEFAULT_NOMINATIM_URL,
            nominatim_user_agent=env.get('NOMINATIM_USER_AGENT') or Config.DEFAULT_NOMINATIM_USER_AGENT,
        )


__all__ = ['Config', 'FeatureFlags', 'ServiceSettings']
