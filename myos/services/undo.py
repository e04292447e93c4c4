"""
Single-slot undo buffer.

A destructive action offers an undo callback; it stays available for a short
window and is replaced by the next offer.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from myos.core.timestamps import Clock, utcnow

logger = logging.getLogger(__name__)

UndoCallback = Callable[[], Awaitable[None]]


@dataclass
class PendingUndo:
    message: str
    callback: UndoCallback
    expires_at: datetime


class UndoBuffer:
    def __init__(self, window_seconds: float = 5.0, clock: Clock = utcnow):
        self.window = timedelta(seconds=window_seconds)
        self.clock = clock
        self._pending: Optional[PendingUndo] = None

    def offer(self, message: str, callback: UndoCallback) -> None:
        """Make ``callback`` the current undo, replacing any earlier one."""
        self._pending = PendingUndo(message=message, callback=callback, expires_at=self.clock() + self.window)

    @property
    def pending(self) -> Optional[PendingUndo]:
        if self._pending and self.clock() >= self._pending.expires_at:
            self._pending = None
        return self._pending

    async def undo(self) -> Optional[str]:
        """
        Run the pending undo if it is still inside its window.

        Returns:
            The message of the undone action, or None if nothing was undone
        """
        pending = self.pending
        if pending is None:
            return None
        self._pending = None
        await pending.callback()
        logger.info(f"Undone: {pending.message}")
        return pending.message

    def clear(self) -> None:
        self._pending = None
