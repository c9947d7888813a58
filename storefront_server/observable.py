"""Change notification shared by the controllers."""

import logging
from typing import Callable, Optional

from .exceptions import StorefrontError
from .models import Notice, NoticeLevel

logger = logging.getLogger(__name__)

Listener = Callable[["Observable"], None]


class Observable:
    """
    Base for controllers that views render from.

    Every state mutation ends with ``_notify()``, which calls the subscribed
    listeners with the controller itself. ``notice`` holds the last message
    meant for the user and ``last_error`` the last error the controller
    absorbed instead of raising.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self.notice: Optional[Notice] = None
        self.last_error: Optional[StorefrontError] = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                # A broken view must not corrupt controller state
                logger.error(f"View listener failed: {e}", exc_info=True)

    def _show(self, level: NoticeLevel, message: str) -> None:
        self.notice = Notice(level=level, message=message)
