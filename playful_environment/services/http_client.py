"""
JSON-over-HTTPS helper shared by the collaborator clients.

One request, one response, no retry. Every failure is raised as a
ServiceError whose message is safe to show in the status bar.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..config import Config

logger = logging.getLogger(__name__)


class ServiceErrorKind(Enum):
    """Why a collaborator call failed."""
    NOT_CONFIGURED = "not_configured"    # missing API key or ids
    BAD_REQUEST = "bad_request"          # caller passed unusable input
    UPSTREAM_STATUS = "upstream_status"  # non-2xx from the service
    EMPTY_RESPONSE = "empty_response"    # 2xx without the expected fields
    NETWORK = "network"                  # connection, timeout, TLS


class ServiceError(Exception):
    """A collaborator failure with a user-facing message."""

    def __init__(self, kind: ServiceErrorKind, message: str,
                 status: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status
        self.detail = detail

    def __repr__(self):
        return f"ServiceError({self.kind.value}, {self.message!r}, status={self.status})"


def _read_error_body(error: urllib.error.HTTPError) -> Any:
    try:
        raw = error.read().decode('utf-8', errors='replace')
    except OSError:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def request_json(
    url: str,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    error_message: str = "Request failed.",
    timeout: int = Config.REQUEST_TIMEOUT_SEC,
) -> Dict[str, Any]:
    """
    Send a request and decode the JSON response.

    Args:
        url: Full URL including query string
        payload: JSON body; the request is a POST when given, otherwise GET
        headers: Extra request headers
        error_message: Message carried by any ServiceError raised
        timeout: Socket timeout in seconds

    Returns:
        Decoded JSON object

    Raises:
        ServiceError: UPSTREAM_STATUS, NETWORK or EMPTY_RESPONSE
    """
    data = json.dumps(payload).encode('utf-8') if payload is not None else None
    req = urllib.request.Request(url, data=data, method='POST' if data is not None else 'GET')
    req.add_header('Accept', 'application/json')
    if data is not None:
        req.add_header('Content-Type', 'application/json')
    for name, value in (headers or {}).items():
        req.add_header(name, value)

    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as e:
        detail = _read_error_body(e)
        logger.error(f"{req.get_method()} {urllib.parse.urlsplit(url).path} returned {e.code}: {detail}")
        raise ServiceError(ServiceErrorKind.UPSTREAM_STATUS, error_message,
                           status=e.code, detail=detail) from e
    except (urllib.error.URLError, OSError) as e:
        logger.error(f"{req.get_method()} {urllib.parse.urlsplit(url).path} failed: {e}")
        raise ServiceError(ServiceErrorKind.NETWORK, error_message) from e

    try:
        decoded = json.loads(body.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise ServiceError(ServiceErrorKind.EMPTY_RESPONSE, error_message) from e

    if not isinstance(decoded, dict):
        raise ServiceError(ServiceErrorKind.EMPTY_RESPONSE, error_message, detail=decoded)
    return decoded


def build_url(base_url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Append query parameters to a URL, keeping any it already has."""
    if not params:
        return base_url
    parts = urllib.parse.urlsplit(base_url)
    query = urllib.parse.parse_qsl(parts.query)
    query.extend((key, str(value)) for key, value in params.items())
    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


__all__ = ['ServiceErrorKind', 'ServiceError', 'request_json', 'build_url']
