from pathlib import Path

import pytest

from legged_host.core.messages import ClientRole
from legged_host.core.settings import ClientSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("LEGGED_HOST_ENDPOINT", "LEGGED_HOST_ROLE", "LEGGED_HOST_RECV_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)


def test_default_profile():
    s = ClientSettings.load()
    assert s.connection.resolved_endpoint == "tcp://127.0.0.1:33445"
    assert s.connection.client_role is ClientRole.CONTROLLER
    assert s.connection.recv_timeout_ms == -1
    assert s.robot.local_ip is None
    assert s.robot.dog_ip == "192.168.234.1"
    assert s.logging.record is False


def test_navigation_profile():
    s = ClientSettings.load("navigation")
    assert s.connection.client_role is ClientRole.NAVIGATOR
    assert s.connection.recv_timeout_ms == 2000
    assert s.logging.record is True
    # robot section omitted -> defaults
    assert s.robot.local_port is None


def test_missing_profile_raises():
    with pytest.raises(FileNotFoundError):
        ClientSettings.load("does_not_exist")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LEGGED_HOST_ENDPOINT", "tcp://10.0.0.5:40000")
    monkeypatch.setenv("LEGGED_HOST_ROLE", "navigation")
    monkeypatch.setenv("LEGGED_HOST_RECV_TIMEOUT_MS", "750")

    s = ClientSettings.load()
    assert s.connection.resolved_endpoint == "tcp://10.0.0.5:40000"
    assert s.connection.client_role is ClientRole.NAVIGATOR
    assert s.connection.recv_timeout_ms == 750


def test_bad_env_role_rejected(monkeypatch):
    monkeypatch.setenv("LEGGED_HOST_ROLE", "admin")
    with pytest.raises(ValueError):
        ClientSettings.load()


def test_from_file(tmp_path: Path):
    cfg = tmp_path / "client.yaml"
    cfg.write_text(
        "connection:\n"
        "  host: 192.168.1.20\n"
        "  port: 5555\n"
        "robot:\n"
        "  local_ip: 192.168.234.15\n"
        "  local_port: 43988\n",
        encoding="utf-8",
    )
    s = ClientSettings.from_file(cfg)
    assert s.connection.resolved_endpoint == "tcp://192.168.1.20:5555"
    assert s.robot.local_ip == "192.168.234.15"
    assert s.robot.local_port == 43988


def test_empty_file_gives_defaults(tmp_path: Path):
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")
    s = ClientSettings.from_file(cfg)
    assert s.connection.port == 33445
    assert s.logging.name == "legged_host"


def test_bad_role_in_file_rejected():
    with pytest.raises(ValueError):
        ClientSettings.from_dict({"connection": {"role": "pilot"}})


def test_unknown_key_rejected():
    with pytest.raises(TypeError):
        ClientSettings.from_dict({"connection": {"hostname": "x"}})
