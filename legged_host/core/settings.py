# legged_host/core/settings.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .messages import ClientRole
from .protocol import DEFAULT_DOG_IP, DEFAULT_HOST, DEFAULT_PORT, endpoint_from

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


@dataclass
class ConnectionSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    endpoint: Optional[str] = None     # full "tcp://..." endpoint; wins over host/port
    role: str = ClientRole.CONTROLLER.value   # "remote_controller" | "navigation"
    recv_timeout_ms: int = -1          # -1 = block until the reply arrives
    send_timeout_ms: int = -1
    linger_ms: int = 0

    @property
    def resolved_endpoint(self) -> str:
        return self.endpoint or endpoint_from(self.host, self.port)

    @property
    def client_role(self) -> ClientRole:
        return ClientRole(self.role)


@dataclass
class RobotSettings:
    # used for initRobot when local_ip is set
    local_ip: Optional[str] = None
    local_port: Optional[int] = None
    dog_ip: str = DEFAULT_DOG_IP


@dataclass
class LoggingSettings:
    name: str = "legged_host"
    log_dir: str = "logs"
    level: str = "INFO"
    console: bool = False
    record: bool = False     # JSONL flight recorder of every envelope
    dedup_cooldown_s: float = 0.0


@dataclass
class ClientSettings:
    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    robot: RobotSettings = field(default_factory=RobotSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClientSettings":
        data = data or {}
        settings = cls(
            connection=ConnectionSettings(**(data.get("connection") or {})),
            robot=RobotSettings(**(data.get("robot") or {})),
            logging=LoggingSettings(**(data.get("logging") or {})),
        )
        # fail early on a bad role rather than at connect time
        settings.connection.client_role
        return settings

    @classmethod
    def from_file(cls, path: "str | Path") -> "ClientSettings":
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)

    @classmethod
    def load(cls, profile: str = "default") -> "ClientSettings":
        """
        Load config/client_profile_<profile>.yaml, then apply environment overrides:
          LEGGED_HOST_ENDPOINT, LEGGED_HOST_ROLE, LEGGED_HOST_RECV_TIMEOUT_MS
        """
        cfg_path = CONFIG_DIR / f"client_profile_{profile}.yaml"
        settings = cls.from_file(cfg_path)
        settings.apply_env()
        return settings

    def apply_env(self) -> None:
        endpoint = os.environ.get("LEGGED_HOST_ENDPOINT")
        if endpoint:
            self.connection.endpoint = endpoint

        role = os.environ.get("LEGGED_HOST_ROLE")
        if role:
            self.connection.role = ClientRole(role).value

        timeout = os.environ.get("LEGGED_HOST_RECV_TIMEOUT_MS")
        if timeout:
            self.connection.recv_timeout_ms = int(timeout)
