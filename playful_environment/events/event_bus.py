"""
EventBus - Central event system for application-wide state

Pattern: Observer/Publisher-Subscriber

Keeps the toolbar, canvas and main window in sync without them holding
references to each other.
"""

from PyQt6.QtCore import QObject, pyqtSignal
from typing import Optional, Set


class EventBus(QObject):
    """
    Central event bus for decoupled communication between components

    Usage:
        event_bus = get_event_bus()
        event_bus.ink_changed.connect(some_handler)
        event_bus.set_has_ink(True)
    """

    # Image events
    image_loaded = pyqtSignal(int, int)  # natural width, height

    # Sketch events
    tool_changed = pyqtSignal(object)  # DrawingTool
    brush_changed = pyqtSignal(object)  # BrushSettings
    ink_changed = pyqtSignal(bool)  # has_ink
    history_changed = pyqtSignal(int)  # snapshot count

    # Location events
    location_changed = pyqtSignal(str)  # display name

    # Status events
    status_message = pyqtSignal(str)  # user-visible message

    # Loading state events
    loading_started = pyqtSignal(str)  # channel
    loading_finished = pyqtSignal(str)  # channel

    def __init__(self):
        super().__init__()

        # State storage
        self._has_ink: bool = False
        self._location: str = ""
        self._loading: Set[str] = set()

    # Getters (read current state)

    def has_ink(self) -> bool:
        """Check if the sketch layer has any paint"""
        return self._has_ink

    def get_location(self) -> str:
        """Get the current location label"""
        return self._location

    def is_loading(self, channel: Optional[str] = None) -> bool:
        """Check if a channel (or any channel) has a request in flight"""
        if channel is None:
            return bool(self._loading)
        return channel in self._loading

    # Setters (update state and emit signals)

    def set_has_ink(self, has_ink: bool):
        """
        Update ink presence

        Args:
            has_ink: True if any sketch pixel is non-transparent
        """
        if self._has_ink != has_ink:
            self._has_ink = has_ink
            self.ink_changed.emit(has_ink)

    def set_location(self, location: str):
        """Set the resolved location label"""
        if self._location != location:
            self._location = location
            self.location_changed.emit(location)

    def show_status(self, message: str):
        """Show a message in the status bar"""
        self.status_message.emit(message)

    def start_loading(self, channel: str):
        """Signal that a request started"""
        self._loading.add(channel)
        self.loading_started.emit(channel)

    def finish_loading(self, channel: str):
        """Signal that a request finished"""
        self._loading.discard(channel)
        self.loading_finished.emit(channel)


# Singleton instance (lazy initialization)
_event_bus_instance: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """
    Get global EventBus singleton instance

    Returns:
        Global EventBus instance
    """
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance


# Export
__all__ = ['EventBus', 'get_event_bus']
