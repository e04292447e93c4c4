# myos/services/__init__.py
"""
Shared services layer for cross-module functionality.
"""

from myos.services.event_bus import EventBus, EventType
from myos.services.action_log import ActionLogger
from myos.services.undo import UndoBuffer

__all__ = [
    "EventBus",
    "EventType",
    "ActionLogger",
    "UndoBuffer",
]
