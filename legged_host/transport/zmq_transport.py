# legged_host/transport/zmq_transport.py

from __future__ import annotations

import logging
from typing import Optional

import zmq

from legged_host.core.errors import ReplyTimeout, TransportError
from .base_transport import BaseTransport

logger = logging.getLogger(__name__)


class ZmqTransport(BaseTransport):
    """
    ZeroMQ DEALER transport:
      - Sets the socket identity before connecting so the service's ROUTER
        can address this client.
      - Sends and receives single-frame bodies.
      - recv_timeout_ms = -1 blocks forever.

    A receive timeout raises ReplyTimeout. The late reply may still arrive on
    this socket, so the session closes the connection instead of reusing it.
    """

    def __init__(
        self,
        context: Optional[zmq.Context] = None,
        recv_timeout_ms: int = -1,
        send_timeout_ms: int = -1,
        linger_ms: int = 0,
    ) -> None:
        super().__init__()
        self.recv_timeout_ms = int(recv_timeout_ms)
        self.send_timeout_ms = int(send_timeout_ms)
        self.linger_ms = int(linger_ms)

        self._external_context = context
        self._context: Optional[zmq.Context] = None
        self._socket: Optional[zmq.Socket] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _open(self) -> None:
        try:
            self._context = self._external_context or zmq.Context()
            self._socket = self._make_socket()
        except zmq.ZMQError as e:
            self._release_context()
            raise TransportError(f"Cannot connect to {self.endpoint}: {e}") from e
        logger.debug("[ZmqTransport] %s connected to %s", self.identity, self.endpoint)

    def _close(self) -> None:
        if self._socket is not None:
            self._socket.close(linger=self.linger_ms)
            self._socket = None
        self._release_context()
        logger.debug("[ZmqTransport] %s closed", self.identity)

    def _make_socket(self) -> zmq.Socket:
        assert self._context is not None
        assert self.endpoint is not None and self.identity is not None
        sock = self._context.socket(zmq.DEALER)
        try:
            sock.setsockopt(zmq.IDENTITY, self.identity.encode("utf-8"))
            sock.setsockopt(zmq.RCVTIMEO, self.recv_timeout_ms)
            sock.setsockopt(zmq.SNDTIMEO, self.send_timeout_ms)
            sock.setsockopt(zmq.LINGER, self.linger_ms)
            sock.connect(self.endpoint)
        except zmq.ZMQError:
            sock.close(linger=0)
            raise
        return sock

    def _release_context(self) -> None:
        # only terminate contexts we created
        if self._context is not None and self._external_context is None:
            self._context.term()
        self._context = None

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------

    def send_bytes(self, data: bytes) -> None:
        if self._socket is None:
            raise TransportError("ZMQ socket not connected")
        try:
            self._socket.send(data)
        except zmq.Again as e:
            raise TransportError(f"Send timed out after {self.send_timeout_ms} ms") from e
        except zmq.ZMQError as e:
            raise TransportError(f"Send failed: {e}") from e

    def recv_bytes(self) -> bytes:
        if self._socket is None:
            raise TransportError("ZMQ socket not connected")
        try:
            return self._socket.recv()
        except zmq.Again as e:
            raise ReplyTimeout(f"Receive timed out after {self.recv_timeout_ms} ms") from e
        except zmq.ZMQError as e:
            raise TransportError(f"Receive failed: {e}") from e
