"""
Reverse geocoder

Resolves photo GPS coordinates to a place name through Nominatim.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..config import Config
from .http_client import ServiceError, ServiceErrorKind, build_url, request_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """A resolved place."""
    display_name: str = ''
    address: Dict[str, Any] = field(default_factory=dict)
    lat: Optional[str] = None
    lon: Optional[str] = None

    def short_name(self) -> str:
        """Neighbourhood-level label, falling back to the full display name."""
        for key in ('suburb', 'neighbourhood', 'village', 'town', 'city'):
            locality = self.address.get(key)
            if locality:
                country = self.address.get('country')
                return f"{locality}, {country}" if country else str(locality)
        return self.display_name


class ReverseGeocoder:
    """Client for the reverse geocoding collaborator."""

    def __init__(self, base_url: str = Config.DEFAULT_NOMINATIM_URL,
                 user_agent: str = Config.DEFAULT_NOMINATIM_USER_AGENT):
        self._base_url = base_url
        self._user_agent = user_agent

    def reverse(self, lat: float, lon: float) -> GeocodeResult:
        """
        Look up the place at a coordinate.

        Raises:
            ServiceError: BAD_REQUEST for missing coordinates, else upstream failures
        """
        if lat is None or lon is None:
            raise ServiceError(ServiceErrorKind.BAD_REQUEST,
                               "Both lat and lon query parameters are required.")

        url = build_url(self._base_url, {
            "format": "jsonv2",
            "lat": lat,
            "lon": lon,
            "zoom": 14,
            "addressdetails": 1,
        })
        data = request_json(
            url,
            headers={"User-Agent": self._user_agent},
            error_message="Reverse geocoding failed.",
        )

        address = data.get("address")
        result = GeocodeResult(
            display_name=data.get("display_name") or '',
            address=address if isinstance(address, dict) else {},
            lat=data.get("lat"),
            lon=data.get("lon"),
        )
        logger.debug(f"Reverse geocoded ({lat}, {lon}) to {result.display_name!r}")
        return result


__all__ = ['GeocodeResult', 'ReverseGeocoder']
