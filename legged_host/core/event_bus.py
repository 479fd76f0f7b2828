# legged_host/core/event_bus.py

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Any

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple synchronous event bus.
    Handlers run on the thread that publishes (usually the caller of the
    session), so keep them fast.

    Topics published by the session:
      connection.state  {"old": ConnectionState, "new": ConnectionState, "endpoint": str}
      request.failed    {"command": str, "kind": ErrorKind, "message": str}
    """

    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> None:
        """Register a handler for a topic."""
        self._subs[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, topic: str, data: Any) -> None:
        """Call all handlers for a topic."""
        for h in list(self._subs.get(topic, [])):
            try:
                h(data)
            except Exception:  # one bad handler must not break a request
                logger.exception("[Bus] handler error on '%s'", topic)
