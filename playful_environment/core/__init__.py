"""Core sketching and prompt logic for Playful Environment Designer"""

from .sketch_layer import SketchLayer
from .stroke_engine import DrawingTool, StrokeState, BrushSettings, Stroke, SampledColor, StrokeMapper
from .compositor import (
    CompositeMode,
    ConceptPayload,
    build_composite,
    build_mask,
    build_inpainting_images,
    prepare_concept_payload,
)
from .preview import downscale_data_url, downscale_mask_data_url
from .prompt_builder import (
    PromptFields,
    build_suggestion_prompt,
    build_vulnerability_prompt,
    build_concept_prompt,
)
from .photo_metadata import read_gps_coordinates
from .session_export import SessionRecord, export_session_csv

__all__ = [
    'SketchLayer',
    'DrawingTool',
    'StrokeState',
    'BrushSettings',
    'Stroke',
    'SampledColor',
    'StrokeMapper',
    'CompositeMode',
    'ConceptPayload',
    'build_composite',
    'build_mask',
    'build_inpainting_images',
    'prepare_concept_payload',
    'downscale_data_url',
    'downscale_mask_data_url',
    'PromptFields',
    'build_suggestion_prompt',
    'build_vulnerability_prompt',
    'build_concept_prompt',
    'read_gps_coordinates',
    'SessionRecord',
    'export_session_csv',
]
