# legged_host/core/session.py
"""
Transport session: one logical connection to the high-level service.

The session owns the transport, this client's socket identity and the
connection state. It performs the register handshake on connect and runs
exactly one request/reply round trip per send_request() call.

send_request() never raises for transport or decode failures; it returns a
synthesized failure Response instead, tagged with an ErrorKind.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from legged_host.transport.base_transport import BaseTransport

from .errors import ErrorKind, ProtocolError, ReplyTimeout, TransportError
from .event_bus import EventBus
from .messages import ClientRole, ConnectionState
from .protocol import (
    DEFAULT_ENDPOINT,
    NOT_CONNECTED_MESSAGE,
    REQUEST_FAILED_MESSAGE,
    Command,
    Request,
    Response,
    build_request,
    decode_response,
    encode_request,
    make_identity,
)

logger = logging.getLogger(__name__)


class Session:
    """
    Parameters
    ----------
    transport : BaseTransport
        Byte-level request/reply transport (ZmqTransport in production).
    role : ClientRole
        Sent in the register command; also picks the identity prefix.
    endpoint : str
        Default endpoint used by connect() when none is given.
    bus : EventBus, optional
        Receives connection.state / request.failed events.
    clock : callable
        Nanosecond clock used for the identity.

    Notes
    -----
    The connection is released on context-manager exit, on disconnect(), or
    at the latest when the session is garbage collected.

    A reply timeout expires the session: connect() then returns False and
    renew() gives a replacement with a new identity.

    Examples
    --------
    >>> with Session(ZmqTransport(), ClientRole.NAVIGATOR) as session:
    ...     session.connect()
    ...     reply = session.send_request(build_request(Command.HEARTBEAT))
    """

    def __init__(
        self,
        transport: BaseTransport,
        role: ClientRole,
        endpoint: str = DEFAULT_ENDPOINT,
        bus: Optional[EventBus] = None,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        self.transport = transport
        self.role = role
        self.endpoint = endpoint
        self.bus = bus or EventBus()

        self._clock = clock
        self._identity = make_identity(role, clock)
        self._state = ConnectionState.DISCONNECTED
        self._expired = False
        self._lock = threading.RLock()

    # ---------- Properties ----------

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def expired(self) -> bool:
        """
        True once a reply timed out. The service may still deliver that reply
        to this identity, so the session can never be connected again; build
        a new Session (new identity) instead.
        """
        return self._expired

    # ---------- Lifecycle ----------

    def connect(self, endpoint: Optional[str] = None) -> bool:
        """
        Open the transport and register with the service.

        Returns True when already connected or when registration succeeds.
        On failure the session is torn down again and False is returned;
        there is no retry.
        """
        with self._lock:
            if self.is_connected():
                return True

            if self._expired:
                logger.error(
                    "[Session] %s timed out waiting for a reply; create a new session to reconnect",
                    self._identity,
                )
                self.bus.publish(
                    "request.failed",
                    {"command": "connect", "kind": ErrorKind.CONNECT, "message": "session expired"},
                )
                return False

            if endpoint is not None:
                self.endpoint = endpoint

            try:
                self.transport.open(self.endpoint, self._identity)
            except TransportError as e:
                logger.error("[Session] Connect to %s failed: %s", self.endpoint, e)
                self.transport.close()
                self.bus.publish(
                    "request.failed",
                    {"command": "connect", "kind": ErrorKind.CONNECT, "message": str(e)},
                )
                return False

            self._set_state(ConnectionState.CONNECTED)

            reply = self.send_request(
                build_request(Command.REGISTER, client_type=self.role.value)
            )
            if not reply.success:
                logger.error(
                    "[Session] Registration failed: %s",
                    reply.message or "unknown error",
                )
                self.disconnect()
                return False

            logger.info("[Session] Connected to %s as %s", self.endpoint, self._identity)
            return True

    def disconnect(self) -> None:
        """Close the connection. Repeated calls are no-ops."""
        with self._lock:
            if not self.is_connected():
                return
            self._set_state(ConnectionState.DISCONNECTED)
            self.transport.close()
            logger.info("[Session] Disconnected from %s", self.endpoint)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __del__(self) -> None:
        # garbage collection may run at any point, so no events or logging here
        if getattr(self, "_state", None) is ConnectionState.CONNECTED:
            self._state = ConnectionState.DISCONNECTED
            self.transport.close()

    def renew(self) -> "Session":
        """
        Disconnect and return a new, unconnected Session on the same transport,
        endpoint and bus with a fresh identity. Used to recover an expired
        session.
        """
        self.disconnect()
        return Session(
            self.transport,
            self.role,
            endpoint=self.endpoint,
            bus=self.bus,
            clock=self._clock,
        )

    # ---------- Request / reply ----------

    def send_request(self, request: Request) -> Response:
        """One round trip. Always returns a well-formed Response."""
        with self._lock:
            if not self.is_connected():
                return Response.failure(ErrorKind.NOT_CONNECTED, NOT_CONNECTED_MESSAGE)

            try:
                body = encode_request(request)
            except ProtocolError as e:
                return self._failed(request, ErrorKind.PROTOCOL, e)

            try:
                self.transport.send_bytes(body)
                data = self.transport.recv_bytes()
            except ReplyTimeout as e:
                # a late reply would be read as the answer to the next request
                response = self._failed(request, ErrorKind.TRANSPORT, e)
                self._expired = True
                self.disconnect()
                return response
            except TransportError as e:
                return self._failed(request, ErrorKind.TRANSPORT, e)

            try:
                return decode_response(data)
            except ProtocolError as e:
                return self._failed(request, ErrorKind.PROTOCOL, e)

    # ---------- Internal ----------

    def _failed(self, request: Request, kind: ErrorKind, err: Exception) -> Response:
        logger.error("[Session] Request %s failed: %s", request.command.value, err)
        self.bus.publish(
            "request.failed",
            {"command": request.command.value, "kind": kind, "message": str(err)},
        )
        return Response.failure(kind, REQUEST_FAILED_MESSAGE)

    def _set_state(self, new: ConnectionState) -> None:
        old = self._state
        self._state = new
        if old is not new:
            logger.debug("[Session] State %s -> %s", old.value, new.value)
            self.bus.publish(
                "connection.state",
                {"old": old, "new": new, "endpoint": self.endpoint},
            )
