"""
Photo metadata reader

Extracts GPS coordinates from a photo's EXIF block so the location can be
reverse geocoded.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image, ExifTags, UnidentifiedImageError

logger = logging.getLogger(__name__)


def dms_to_decimal(dms: Sequence, ref: str) -> float:
    """
    Convert EXIF degrees/minutes/seconds to decimal degrees.

    Example:
        >>> dms_to_decimal((52, 30, 0), 'S')
        -52.5
    """
    degrees, minutes, seconds = (float(part) for part in dms)
    value = degrees + minutes / 60.0 + seconds / 3600.0
    if ref and ref.strip().upper() in ('S', 'W'):
        value = -value
    return value


def read_gps_coordinates(image_path: Path) -> Optional[Tuple[float, float]]:
    """
    Read (latitude, longitude) from a photo.

    Returns:
        Decimal coordinates, or None if the file has no usable GPS tags
    """
    try:
        with Image.open(image_path) as image:
            gps = image.getexif().get_ifd(ExifTags.IFD.GPSInfo)
    except (OSError, UnidentifiedImageError) as e:
        logger.debug(f"Could not read EXIF from {image_path}: {e}")
        return None

    latitude = gps.get(ExifTags.GPS.GPSLatitude)
    longitude = gps.get(ExifTags.GPS.GPSLongitude)
    if not latitude or not longitude:
        return None

    try:
        return (
            dms_to_decimal(latitude, gps.get(ExifTags.GPS.GPSLatitudeRef, 'N')),
            dms_to_decimal(longitude, gps.get(ExifTags.GPS.GPSLongitudeRef, 'E')),
        )
    except (TypeError, ValueError, ZeroDivisionError) as e:
        logger.debug(f"Malformed GPS tags in {image_path}: {e}")
        return None


__all__ = ['dms_to_decimal', 'read_gps_coordinates']
