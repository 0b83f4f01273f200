"""
Playful Environment Designer

Sketch playful, climate-adaptive interventions over a site photo and turn
them into concept images with Qt6.
"""

__version__ = "1.0.0"

from .config import Config, FeatureFlags, ServiceSettings
from .events.event_bus import EventBus, get_event_bus

__all__ = [
    'Config',
    'FeatureFlags',
    'ServiceSettings',
    'EventBus',
    'get_event_bus',
]
