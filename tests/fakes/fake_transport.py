import json
from typing import Any, Callable, Optional, Union

from legged_host.core.errors import TransportError
from legged_host.core.protocol import decode_request
from legged_host.transport.base_transport import BaseTransport

Reply = Union[bytes, dict, Exception]


def default_responder(request: dict) -> dict:
    # every command succeeds, nothing else in the reply
    return {"success": True}


class FakeTransport(BaseTransport):
    """
    Scripted request/reply transport.

    - replies queued with queue_reply() are handed out first, in order
      (bytes as-is, dicts JSON-encoded, exceptions raised from recv_bytes)
    - otherwise `responder(request_dict)` builds the reply
    - every body sent is kept in `sent`
    """
    def __init__(
        self,
        responder: Optional[Callable[[dict], Any]] = default_responder,
        *,
        fail_open: bool = False,
        fail_send: bool = False,
    ) -> None:
        super().__init__()
        self.responder = responder
        self.fail_open = fail_open
        self.fail_send = fail_send

        self.sent: list[bytes] = []
        self.open_count = 0
        self.close_count = 0
        self._queued: list[Reply] = []

    # --- test helpers ---

    def queue_reply(self, reply: Reply) -> None:
        self._queued.append(reply)

    def sent_requests(self) -> list[dict]:
        return [json.loads(b.decode("utf-8")) for b in self.sent]

    def sent_commands(self) -> list[str]:
        return [r["command"] for r in self.sent_requests()]

    # --- BaseTransport ---

    def _open(self) -> None:
        if self.fail_open:
            raise TransportError("connection refused")
        self.open_count += 1

    def _close(self) -> None:
        self.close_count += 1

    def send_bytes(self, data: bytes) -> None:
        if self.fail_send:
            raise TransportError("send failed")
        self.sent.append(data)

    def recv_bytes(self) -> bytes:
        if self._queued:
            reply = self._queued.pop(0)
        else:
            if self.responder is None:
                raise TransportError("no reply scripted")
            reply = self.responder(decode_request(self.sent[-1]).to_dict())

        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply).encode("utf-8")
        return reply
