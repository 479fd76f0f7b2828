# legged_host/core/robot_runtime.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from legged_host.logger.logger import LogBundle
from legged_host.logger.recording import RecordingTransport
from legged_host.transport.base_transport import BaseTransport
from legged_host.transport.zmq_transport import ZmqTransport

from .client import HighLevelClient
from .event_bus import EventBus
from .session import Session
from .settings import ClientSettings

logger = logging.getLogger(__name__)


@dataclass
class ClientRuntime:
    """
    Everything build_client() wired together.

    close() disconnects and flushes the logs; use it as a context manager to
    release the socket on every exit path.
    """
    settings: ClientSettings
    bus: EventBus
    transport: BaseTransport
    session: Session
    client: HighLevelClient
    logs: Optional[LogBundle] = None

    def start(self) -> bool:
        """
        Connect, then run initRobot when the profile names a local address.
        Returns False if either step fails.
        """
        if not self.client.connect():
            return False

        robot = self.settings.robot
        if robot.local_ip is None:
            return True

        ok = self.client.init_robot(robot.local_ip, robot.local_port or 0, robot.dog_ip)
        if not ok:
            logger.error(
                "[Runtime] initRobot(%s:%s -> %s) failed: %s",
                robot.local_ip, robot.local_port, robot.dog_ip,
                self.client.last_response.message if self.client.last_response else None,
            )
        return ok

    def restart(self) -> bool:
        """
        Replace the session with a fresh identity and start() again.

        Needed after a reply timeout, when the old session has expired.
        """
        old = self.session.identity
        self.session = self.session.renew()
        self.client.session = self.session
        logger.info("[Runtime] Session %s replaced by %s", old, self.session.identity)
        return self.start()

    def close(self) -> None:
        self.client.disconnect()
        if self.logs is not None:
            self.logs.close()
            self.logs = None

    def __enter__(self) -> "ClientRuntime":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def build_client(
    profile: str = "default",
    settings: Optional[ClientSettings] = None,
    transport: Optional[BaseTransport] = None,
) -> ClientRuntime:
    """
    Build a client for a settings profile.

    This:
      - Loads ClientSettings (unless given).
      - Sets up the rotating text log and, if enabled, the JSONL recorder.
      - Builds the ZeroMQ transport (unless one is injected) and wraps it
        in a RecordingTransport when recording.
      - Creates Session + HighLevelClient. Nothing is connected yet.
    """
    settings = settings or ClientSettings.load(profile)
    log_cfg = settings.logging
    conn = settings.connection

    logs = LogBundle(
        name=log_cfg.name,
        log_dir=log_cfg.log_dir,
        level=logging.getLevelName(log_cfg.level.upper()),
        console=log_cfg.console,
        dedup_cooldown_s=log_cfg.dedup_cooldown_s,
    )

    if transport is None:
        transport = ZmqTransport(
            recv_timeout_ms=conn.recv_timeout_ms,
            send_timeout_ms=conn.send_timeout_ms,
            linger_ms=conn.linger_ms,
        )
    if log_cfg.record:
        transport = RecordingTransport(transport, logs.events)

    bus = EventBus()
    session = Session(
        transport,
        conn.client_role,
        endpoint=conn.resolved_endpoint,
        bus=bus,
    )
    client = HighLevelClient(session)

    return ClientRuntime(
        settings=settings,
        bus=bus,
        transport=transport,
        session=session,
        client=client,
        logs=logs,
    )
