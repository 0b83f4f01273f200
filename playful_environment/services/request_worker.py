"""
Background collaborator requests

Pattern: QRunnable workers reporting back through Qt signals

Each request channel ("suggest", "describe", ...) keeps a generation token.
Dispatching a request takes a fresh token; a result is only applied if its
token is still the latest for its channel, so a slow earlier response can
never overwrite a newer one (last-writer-wins).
"""

import itertools
import logging
from typing import Any, Callable, Dict, Optional

from PyQt6.QtCore import QObject, QRunnable, pyqtSignal

from .http_client import ServiceError

logger = logging.getLogger(__name__)


class RequestGate:
    """
    Per-channel generation tokens.

    Usage:
        token = gate.issue("concept")
        ...
        if gate.complete("concept", token):
            apply(result)
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}

    def issue(self, channel: str) -> int:
        """Start a new request on a channel, superseding any in flight."""
        token = next(self._counter)
        self._latest[channel] = token
        return token

    def is_current(self, channel: str, token: int) -> bool:
        return self._latest.get(channel) == token

    def is_pending(self, channel: str) -> bool:
        return channel in self._latest

    def complete(self, channel: str, token: int) -> bool:
        """
        Mark a response as arrived.

        Returns:
            True if the response belongs to the latest request and should be applied
        """
        if not self.is_current(channel, token):
            logger.debug(f"Dropping stale {channel} response (token {token})")
            return False
        del self._latest[channel]
        return True

    def invalidate(self, channel: Optional[str] = None):
        """Forget outstanding requests on one channel, or on all of them."""
        if channel is None:
            self._latest.clear()
        else:
            self._latest.pop(channel, None)


class ServiceTaskSignals(QObject):
    """Signals for ServiceTask"""

    succeeded = pyqtSignal(str, int, object)  # channel, token, result
    failed = pyqtSignal(str, int, str)  # channel, token, error_message


class ServiceTask(QRunnable):
    """
    Background task running one collaborator call.

    Usage:
        task = ServiceTask("describe", token, service.describe, data_url)
        threadpool.start(task)
    """

    def __init__(self, channel: str, token: int, fn: Callable[..., Any], *args, **kwargs):
        super().__init__()
        self.channel = channel
        self.token = token
        self._fn = fn
        self._args = args
        self._kwargs = kwargs
        self.signals = ServiceTaskSignals()

    def run(self):
        """Execute the call and emit its outcome"""
        try:
            result = self._fn(*self._args, **self._kwargs)
        except ServiceError as e:
            logger.warning(f"{self.channel} request failed ({e.kind.value}): {e.message}")
            self.signals.failed.emit(self.channel, self.token, e.message)
        except Exception as e:
            logger.exception(f"Unexpected error in {self.channel} request")
            self.signals.failed.emit(self.channel, self.token, f"Unexpected error: {e}")
        else:
            self.signals.succeeded.emit(self.channel, self.token, result)


__all__ = ['RequestGate', 'ServiceTaskSignals', 'ServiceTask']
