from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional


class BaseTransport(ABC):
    """
    Base class for all request/reply transports. Handles:
      - remembering the endpoint / identity it was opened with
      - open/closed bookkeeping
    Subclasses implement:
      - _open()
      - _close()
      - send_bytes()
      - recv_bytes()

    Every failure is raised as legged_host.core.errors.TransportError.
    send_bytes/recv_bytes block; one body in, one body out.
    """

    def __init__(self) -> None:
        self.endpoint: Optional[str] = None
        self.identity: Optional[str] = None
        self._open_flag = False

    @property
    def is_open(self) -> bool:
        return self._open_flag

    def open(self, endpoint: str, identity: str) -> None:
        self.endpoint = endpoint
        self.identity = identity
        self._open()
        self._open_flag = True

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        if not self._open_flag:
            return
        self._open_flag = False
        self._close()

    @abstractmethod
    def _open(self) -> None:
        ...

    @abstractmethod
    def _close(self) -> None:
        ...

    @abstractmethod
    def send_bytes(self, data: bytes) -> None:
        ...

    @abstractmethod
    def recv_bytes(self) -> bytes:
        ...
