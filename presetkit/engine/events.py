"""Named change events with one listener per (event, name) pair."""

from typing import Callable, Optional


class Dispatcher:
    """Minimal event dispatcher.

    Listeners are registered as ``"event"`` or ``"event.name"``; registering
    again under the same name replaces the previous listener, and passing
    None removes it.
    """

    def __init__(self, *events: str):
        self._listeners: dict[str, dict[str, Callable]] = {e: {} for e in events}

    def on(self, typename: str, callback: Optional[Callable] = None) -> None:
        event, _, name = typename.partition(".")
        if event not in self._listeners:
            raise ValueError(f"Unknown event '{event}'. Known: {', '.join(sorted(self._listeners))}")
        if callback is None:
            self._listeners[event].pop(name, None)
        else:
            self._listeners[event][name] = callback

    def call(self, event: str, *args) -> None:
        for callback in list(self._listeners[event].values()):
            callback(*args)
