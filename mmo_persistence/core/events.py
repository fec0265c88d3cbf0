"""
Notification hooks fired by the persistence engine.

Add-on features subscribe here to react to a connect, a character load or a
character save without the engine depending on them.
"""

import inspect
from typing import Any, Callable, List

from .logging_config import get_logger

logger = get_logger(__name__)


class EventHook:
    """A named list of callbacks. Coroutine callbacks are awaited in order."""

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Callable[..., Any]] = []

    def subscribe(self, handler: Callable[..., Any]) -> None:
        """Subscribe a handler to this hook."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[..., Any]) -> None:
        """Unsubscribe a handler from this hook."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def __len__(self) -> int:
        return len(self._handlers)

    async def fire(self, *args: Any) -> None:
        """
        Call every subscriber with `args`.

        Handler errors propagate to the caller; the write they follow has
        already been committed by then.
        """
        for handler in list(self._handlers):
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
        if self._handlers:
            logger.debug(
                "Hook fired",
                extra={"hook": self.name, "handlers": len(self._handlers)},
            )
