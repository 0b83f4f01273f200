"""Utility functions for Playful Environment Designer"""

from .color_utils import hex_to_rgb, rgb_to_hex, rgba_string, alpha_to_opacity, opacity_to_alpha
from .coordinate_utils import CoordinateConverter, fit_rect
from .image_utils import (
    load_image_as_qimage,
    encode_qimage,
    decode_image_bytes,
    to_data_url,
    parse_data_url,
    data_url_to_qimage,
    qimage_to_rgba_array,
    rgba_array_to_qimage,
)
from .logging_config import LoggingConfig

__all__ = [
    'hex_to_rgb',
    'rgb_to_hex',
    'rgba_string',
    'alpha_to_opacity',
    'opacity_to_alpha',
    'CoordinateConverter',
    'fit_rect',
    # Image utilities
    'load_image_as_qimage',
    'encode_qimage',
    'decode_image_bytes',
    'to_data_url',
    'parse_data_url',
    'data_url_to_qimage',
    'qimage_to_rgba_array',
    'rgba_array_to_qimage',
    'LoggingConfig',
]
