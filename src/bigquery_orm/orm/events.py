import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

BEFORE_SAVE = "before_save"
AFTER_SAVE = "after_save"
SAVE_ERROR = "save_error"
BEFORE_DELETE = "before_delete"
AFTER_DELETE = "after_delete"
DELETE_ERROR = "delete_error"

EVENTS = (BEFORE_SAVE, AFTER_SAVE, SAVE_ERROR, BEFORE_DELETE, AFTER_DELETE, DELETE_ERROR)

Listener = Callable[..., Any]


class EventManager:
    """Per-table registry of save/delete listeners.

    Listeners are called in registration order with keyword arguments
    (``entity``, ``options`` and, for error events, ``error``). Exceptions
    raised by a listener propagate to the caller.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown event {event!r}; expected one of {', '.join(EVENTS)}")
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def listeners(self, event: str) -> List[Listener]:
        return list(self._listeners.get(event, []))

    def dispatch(self, event: str, **payload: Any) -> None:
        for listener in self.listeners(event):
            logger.debug(f"Dispatching {event} to {getattr(listener, '__name__', listener)!r}")
            listener(**payload)
