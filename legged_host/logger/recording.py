# legged_host/logger/recording.py
from __future__ import annotations

from legged_host.core.errors import TransportError
from legged_host.transport.base_transport import BaseTransport

from .logger import JsonlLogger


class RecordingTransport(BaseTransport):
    """
    Wraps any transport; records every body sent and received.

    Rows written to the JSONL recorder:
      transport.open   endpoint, identity, type
      transport.tx     body
      transport.rx     body
      transport.error  op, error
      transport.close  type
    """
    def __init__(self, inner: BaseTransport, recorder: JsonlLogger) -> None:
        super().__init__()
        self._t = inner
        self._rec = recorder

    @property
    def inner(self) -> BaseTransport:
        return self._t

    def _open(self) -> None:
        assert self.endpoint is not None and self.identity is not None
        self._rec.write(
            "transport.open",
            endpoint=self.endpoint,
            identity=self.identity,
            type=type(self._t).__name__,
        )
        try:
            self._t.open(self.endpoint, self.identity)
        except TransportError as e:
            self._rec.write("transport.error", op="open", error=e)
            raise

    def _close(self) -> None:
        self._rec.write("transport.close", type=type(self._t).__name__)
        self._t.close()

    def send_bytes(self, data: bytes) -> None:
        self._rec.write("transport.tx", body=data)
        try:
            self._t.send_bytes(data)
        except TransportError as e:
            self._rec.write("transport.error", op="send", error=e)
            raise

    def recv_bytes(self) -> bytes:
        try:
            data = self._t.recv_bytes()
        except TransportError as e:
            self._rec.write("transport.error", op="recv", error=e)
            raise
        self._rec.write("transport.rx", body=data)
        return data
