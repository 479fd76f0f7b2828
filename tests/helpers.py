import json
from dataclasses import dataclass
from typing import Callable, Optional, Any

from legged_host.core.messages import ClientRole
from legged_host.core.session import Session
from legged_host.core.client import HighLevelClient


@dataclass
class PublishedEvent:
    topic: str
    data: Any


class CapturingBus:
    """
    Wraps your EventBus-like interface: publish(topic, data).
    Useful for asserting what got published.
    """
    def __init__(self) -> None:
        self.events: list[PublishedEvent] = []
        self.subscribers: dict[str, list[Callable[[Any], None]]] = {}

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> None:
        self.subscribers.setdefault(topic, []).append(handler)

    def publish(self, topic: str, data: Any) -> None:
        self.events.append(PublishedEvent(topic, data))
        for h in self.subscribers.get(topic, []):
            h(data)

    def topics(self) -> list[str]:
        return [e.topic for e in self.events]

    def last(self, topic: str) -> Optional[PublishedEvent]:
        for e in reversed(self.events):
            if e.topic == topic:
                return e
        return None


def reply(**fields: Any) -> bytes:
    """Encode a reply body the way the service does."""
    return json.dumps(fields).encode("utf-8")


def table_responder(table: dict[str, dict]) -> Callable[[dict], dict]:
    """
    Reply per command name; unknown commands get {"success": True}.
    Registration always succeeds unless the table overrides it.
    """
    def respond(request: dict) -> dict:
        return table.get(request["command"], {"success": True})
    return respond


class FixedClock:
    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


def make_client(transport, role: ClientRole = ClientRole.CONTROLLER, bus=None, connect: bool = True):
    session = Session(transport, role, bus=bus, clock=FixedClock())
    client = HighLevelClient(session)
    if connect:
        assert client.connect() is True
    return client
