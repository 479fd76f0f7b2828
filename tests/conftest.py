# tests/conftest.py

import os

import pytest

from fakes.fake_transport import FakeTransport
from helpers import CapturingBus, make_client
from legged_host.core.messages import ClientRole

# ============== Fixtures ==============

@pytest.fixture
def bus():
    return CapturingBus()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def controller(transport, bus):
    """Connected CONTROLLER client on a FakeTransport."""
    client = make_client(transport, ClientRole.CONTROLLER, bus=bus)
    yield client
    client.disconnect()


@pytest.fixture
def navigator(transport, bus):
    """Connected NAVIGATOR client on a FakeTransport."""
    client = make_client(transport, ClientRole.NAVIGATOR, bus=bus)
    yield client
    client.disconnect()


# ============== Pytest Configuration ==============

def pytest_addoption(parser):
    parser.addoption(
        "--service-endpoint",
        action="store",
        default=os.getenv("LEGGED_HOST_ENDPOINT", "tcp://127.0.0.1:33445"),
    )
    parser.addoption("--run-hil", action="store_true", default=False, help="Run HIL tests")
    parser.addoption("--hil-timeout-ms", action="store", type=int, default=2000, help="HIL receive timeout")


def pytest_configure(config):
    config.addinivalue_line("markers", "hil: tests against a live high-level service")
    config.addinivalue_line("markers", "zmq: tests that open real ZeroMQ sockets on localhost")


def pytest_collection_modifyitems(config, items):
    """Skip HIL tests unless --run-hil is specified."""
    if not config.getoption("--run-hil"):
        skip_hil = pytest.mark.skip(reason="Need --run-hil option to run HIL tests")
        for item in items:
            if "hil" in item.keywords:
                item.add_marker(skip_hil)


@pytest.fixture(scope="session")
def service_endpoint(request) -> str:
    return request.config.getoption("--service-endpoint")


@pytest.fixture(scope="session")
def hil_timeout_ms(request) -> int:
    return request.config.getoption("--hil-timeout-ms")
