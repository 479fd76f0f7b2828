# legged_host/core/client.py

from __future__ import annotations

import logging
from typing import Any, Optional

from .commands import LeggedCommandsMixin
from .errors import ErrorKind
from .messages import ClientRole
from .protocol import (
    Command,
    Response,
    build_request,
    extract_result,
)
from .session import Session

logger = logging.getLogger(__name__)


class BaseHighLevelClient:
    """
    Core blocking client:

      - Delegates connection lifecycle to a Session.
      - request(): one envelope out, one Response back; the raw Response is
        kept in `last_response` so callers can see success/message/error kind.
      - _query(): request() plus the command table's default policy.

    This class knows nothing about individual commands; those live in
    LeggedCommandsMixin.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.last_response: Optional[Response] = None

    @property
    def role(self) -> ClientRole:
        return self.session.role

    # ---------- Lifecycle ----------

    def connect(self, endpoint: Optional[str] = None) -> bool:
        return self.session.connect(endpoint)

    def disconnect(self) -> None:
        self.session.disconnect()

    def is_connected(self) -> bool:
        return self.session.is_connected()

    def __enter__(self) -> "BaseHighLevelClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    # ---------- Requests ----------

    def request(self, command: Command, **params: Any) -> Response:
        """Send one command and return the decoded (or synthesized) Response."""
        response = self.session.send_request(build_request(command, **params))
        self.last_response = response
        return response

    def _query(self, command: Command, **params: Any) -> Any:
        return extract_result(command, self.request(command, **params))

    def _reject(self, command: Command, reason: str) -> bool:
        """Refuse a command locally, without any I/O."""
        logger.error("[HighLevelClient] %s rejected: %s", command.value, reason)
        self.last_response = Response.failure(ErrorKind.AUTHORIZATION, reason)
        return False


class HighLevelClient(BaseHighLevelClient, LeggedCommandsMixin):
    """
    Full client:

      - Inherits session handling and the request/default policy from
        BaseHighLevelClient.
      - Adds one method per service command from LeggedCommandsMixin.

    Not safe to share between threads without external locking around
    multi-call sequences; one client per thread is the simplest setup.
    """
    pass
