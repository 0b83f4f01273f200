"""Color conversion utilities

Color helpers shared by the brush, the eyedropper and the toolbar.
Supports hex and RGB (0-255 range) conversions plus CSS-style rgba strings.
"""

from typing import Tuple


def rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    """Convert RGB tuple (0-255 range) to hex color string

    Args:
        rgb: RGB color as tuple (0-255 range)

    Returns:
        Hex color string (e.g., "#ff5733")

    Example:
        >>> rgb_to_hex((255, 87, 51))
        '#ff5733'
    """
    r, g, b = (max(0, min(255, int(c))) for c in rgb[:3])
    return '#{:02x}{:02x}{:02x}'.format(r, g, b)


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """
    Convert hex color to RGB tuple (0-255 range)

    Args:
        hex_color: Hex color string (e.g., '#AABBCC' or 'AABBCC')

    Returns:
        Tuple of (r, g, b) values in 0-255 range

    Raises:
        ValueError: If the string is not a 3 or 6 digit hex color
    """
    hex_color = hex_color.strip().lstrip('#')
    # Handle 3-digit hex codes
    if len(hex_color) == 3:
        hex_color = ''.join([c*2 for c in hex_color])
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def rgba_string(hex_color: str, opacity: float) -> str:
    """
    Build a CSS rgba() string from a hex color and an opacity

    Example:
        >>> rgba_string('#ff0000', 0.4)
        'rgba(255, 0, 0, 0.4)'
    """
    r, g, b = hex_to_rgb(hex_color)
    opacity = max(0.0, min(1.0, float(opacity)))
    return f"rgba({r}, {g}, {b}, {opacity:g})"


def alpha_to_opacity(alpha: int) -> float:
    """Convert an 8-bit alpha value to an opacity rounded to 2 decimals."""
    return round(max(0, min(255, alpha)) / 255, 2)


def opacity_to_alpha(opacity: float) -> int:
    """Convert a 0-1 opacity to an 8-bit alpha value."""
    return int(round(max(0.0, min(1.0, opacity)) * 255))


__all__ = [
    'rgb_to_hex',
    'hex_to_rgb',
    'rgba_string',
    'alpha_to_opacity',
    'opacity_to_alpha',
]
