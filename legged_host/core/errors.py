# legged_host/core/errors.py

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Why a request produced a synthesized failure envelope instead of a server reply."""

    CONNECT = "connect"
    NOT_CONNECTED = "not_connected"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    AUTHORIZATION = "authorization"


class LeggedHostError(Exception):
    """Base exception for all client-side errors."""


class TransportError(LeggedHostError):
    """Socket-level failure while opening, sending or receiving."""


class ProtocolError(LeggedHostError):
    """A reply body could not be decoded as a response envelope."""


class ReplyTimeout(TransportError):
    """No reply within the receive timeout; the socket can no longer pair replies with requests."""
