import pytest

from fakes.fake_transport import FakeTransport
from helpers import make_client
from legged_host.core.errors import ErrorKind, TransportError
from legged_host.core.messages import ClientRole


VECTOR_METHODS = {
    "get_quaternion": 4,
    "get_rpy": 3,
    "get_body_acc": 3,
    "get_body_gyro": 3,
    "get_position": 3,
    "get_world_velocity": 3,
    "get_body_velocity": 3,
    "get_leg_abad_joint": 4,
    "get_leg_hip_joint": 4,
    "get_leg_knee_joint": 4,
    "get_leg_abad_joint_vel": 4,
    "get_leg_hip_joint_vel": 4,
    "get_leg_knee_joint_vel": 4,
    "get_leg_abad_joint_torque": 4,
    "get_leg_hip_joint_torque": 4,
    "get_leg_knee_joint_torque": 4,
}

SCALAR_DEFAULTS = {
    "heartbeat": False,
    "get_current_mode": "auto",
    "deinit_robot": False,
    "check_connect": False,
    "stand_up": 0,
    "lie_down": 0,
    "passive": 0,
    "jump": 0,
    "front_jump": 0,
    "backflip": 0,
    "shake_hand": 0,
    "two_leg_stand": 0,
    "get_current_ctrlmode": 0,
    "get_battery_power": 0,
}


@pytest.fixture
def offline():
    transport = FakeTransport()
    return make_client(transport, ClientRole.CONTROLLER, connect=False), transport


@pytest.mark.parametrize("method,length", sorted(VECTOR_METHODS.items()))
def test_vectors_default_to_zeros_when_disconnected(offline, method, length):
    client, transport = offline
    assert getattr(client, method)() == [0.0] * length
    assert transport.sent == []
    assert client.last_response.error is ErrorKind.NOT_CONNECTED


@pytest.mark.parametrize("method,expected", sorted(SCALAR_DEFAULTS.items()))
def test_scalars_default_when_disconnected(offline, method, expected):
    client, transport = offline
    assert getattr(client, method)() == expected
    assert transport.sent == []


def test_motion_defaults_when_disconnected(offline):
    client, transport = offline
    assert client.move(1.0, 0.0, 0.5) == 0
    assert client.attitude_control(0.0, 0.0, 0.0, 0.1) == 0
    assert client.init_robot("10.0.0.2", 43988) is False
    assert client.set_mode("manual") is False
    assert client.cancel_two_leg_stand() is None
    assert transport.sent == []


@pytest.mark.parametrize("method,length", sorted(VECTOR_METHODS.items()))
def test_vectors_default_on_malformed_reply(controller, transport, method, length):
    transport.queue_reply(b"\x00\x01garbage")
    assert getattr(controller, method)() == [0.0] * length
    assert controller.last_response.to_dict() == {"success": False, "message": "Request failed"}
    assert controller.last_response.error is ErrorKind.PROTOCOL


def test_scalars_default_on_transport_error(controller, transport):
    transport.queue_reply(TransportError("Receive timed out after 50 ms"))
    assert controller.get_battery_power() == 0
    transport.queue_reply(TransportError("Receive timed out after 50 ms"))
    assert controller.get_current_mode() == "auto"
    transport.queue_reply(TransportError("Receive timed out after 50 ms"))
    assert controller.heartbeat() is False
    assert controller.last_response.error is ErrorKind.TRANSPORT


def test_success_false_and_missing_field_look_alike(controller, transport):
    # battery genuinely empty
    transport.queue_reply({"success": True, "value": 0})
    assert controller.get_battery_power() == 0
    real = controller.last_response

    # service refused
    transport.queue_reply({"success": False, "message": "robot not initialized"})
    assert controller.get_battery_power() == 0
    refused = controller.last_response

    assert real.success is True
    assert refused.success is False
    assert refused.message == "robot not initialized"


def test_wrong_length_vector_uses_default(controller, transport):
    transport.queue_reply({"success": True, "values": [1.0, 2.0, 3.0]})
    assert controller.get_quaternion() == [0.0, 0.0, 0.0, 0.0]
