"""
LOG event subscriptions.

The central unit only pushes LOG frames for function types whose logging
was enabled on the current connection. SubscriptionManager tracks the
callbacks per function type and reports the transitions that require a
LOG command:

- the first callback for a type needs LOG enable
- removing the last callback for a type needs LOG disable

It does no I/O itself; the client sends the commands.
"""

from __future__ import annotations

import logging
from typing import Callable

from teletask.models.states import StateChange

logger = logging.getLogger(__name__)

StateChangeCallback = Callable[[StateChange], None]
ErrorCallback = Callable[[Exception], None]


class SubscriptionManager:
    """
    Registry of LOG event callbacks per function type.

    Example:
        >>> manager = SubscriptionManager()
        >>> manager.add(FunctionType.RELAY, print)
        True
        >>> manager.add(FunctionType.RELAY, other_callback)
        False
    """

    def __init__(self, on_error: ErrorCallback | None = None) -> None:
        """
        Initialize the manager.

        Args:
            on_error: Receives exceptions raised by callbacks.
        """
        self._callbacks: dict[int, list[StateChangeCallback]] = {}
        self._on_error = on_error

    @property
    def active_types(self) -> frozenset[int]:
        """Function types with at least one callback."""
        return frozenset(self._callbacks)

    def callbacks(self, function_type: int) -> tuple[StateChangeCallback, ...]:
        return tuple(self._callbacks.get(function_type, ()))

    def has_subscribers(self, function_type: int) -> bool:
        return function_type in self._callbacks

    def add(self, function_type: int, callback: StateChangeCallback) -> bool:
        """
        Add a callback.

        Adding a callback that is already registered for the type has no
        effect.

        Returns:
            True if this is the first callback for the function type.
        """
        callbacks = self._callbacks.setdefault(function_type, [])
        first = not callbacks
        if callback not in callbacks:
            callbacks.append(callback)
        return first

    def remove(self, function_type: int, callback: StateChangeCallback) -> bool:
        """
        Remove a callback.

        Returns:
            True if the last callback for the function type was removed.
        """
        callbacks = self._callbacks.get(function_type)
        if not callbacks or callback not in callbacks:
            return False

        callbacks.remove(callback)
        if callbacks:
            return False

        del self._callbacks[function_type]
        return True

    def clear(self) -> None:
        self._callbacks.clear()

    def dispatch(self, event: StateChange) -> int:
        """
        Invoke every callback subscribed to the event's function type.

        A failing callback is logged and reported to the error callback;
        the remaining callbacks still run.

        Returns:
            Number of callbacks invoked.
        """
        callbacks = self.callbacks(event.function_type)
        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error("Subscriber %r failed on %r: %s", callback, event, e)
                if self._on_error is not None:
                    self._on_error(e)
        return len(callbacks)

    def __repr__(self) -> str:
        total = sum(len(c) for c in self._callbacks.values())
        return f"SubscriptionManager(types={len(self._callbacks)}, callbacks={total})"
