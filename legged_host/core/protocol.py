# legged_host/core/protocol.py
"""
JSON envelope protocol spoken with the high-level service.

Request  : {"command": "<name>", "params": {...}}   (params omitted when empty)
Response : {"success": bool, "message": str, ...operation-specific fields...}

Every body is one UTF-8 JSON frame. Requests are serialized compactly with
sorted keys, which is byte-identical to what the service's reference client
emits.

COMMAND_TABLE is the single source of truth for which parameters a command
takes and which reply field carries its result (plus the default used when
that field is missing or malformed).
"""

from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .errors import ErrorKind, ProtocolError
from .messages import ClientRole

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 33445
DEFAULT_ENDPOINT = f"tcp://{DEFAULT_HOST}:{DEFAULT_PORT}"
DEFAULT_DOG_IP = "192.168.234.1"

NOT_CONNECTED_MESSAGE = "Not connected to service"
REQUEST_FAILED_MESSAGE = "Request failed"


class Command(str, Enum):
    REGISTER = "register"
    HEARTBEAT = "heartbeat"

    SET_MODE = "setMode"
    GET_CURRENT_MODE = "getCurrentMode"

    INIT_ROBOT = "initRobot"
    DEINIT_ROBOT = "deinitRobot"
    CHECK_CONNECT = "checkConnect"

    STAND_UP = "standUp"
    LIE_DOWN = "lieDown"
    PASSIVE = "passive"
    JUMP = "jump"
    FRONT_JUMP = "frontJump"
    BACKFLIP = "backflip"
    SHAKE_HAND = "shakeHand"

    MOVE = "move"
    ATTITUDE_CONTROL = "attitudeControl"
    TWO_LEG_STAND = "twoLegStand"
    CANCEL_TWO_LEG_STAND = "cancelTwoLegStand"

    GET_QUATERNION = "getQuaternion"
    GET_RPY = "getRPY"
    GET_BODY_ACC = "getBodyAcc"
    GET_BODY_GYRO = "getBodyGyro"
    GET_POSITION = "getPosition"
    GET_WORLD_VELOCITY = "getWorldVelocity"
    GET_BODY_VELOCITY = "getBodyVelocity"

    GET_LEG_ABAD_JOINT = "getLegAbadJoint"
    GET_LEG_HIP_JOINT = "getLegHipJoint"
    GET_LEG_KNEE_JOINT = "getLegKneeJoint"
    GET_LEG_ABAD_JOINT_VEL = "getLegAbadJointVel"
    GET_LEG_HIP_JOINT_VEL = "getLegHipJointVel"
    GET_LEG_KNEE_JOINT_VEL = "getLegKneeJointVel"
    GET_LEG_ABAD_JOINT_TORQUE = "getLegAbadJointTorque"
    GET_LEG_HIP_JOINT_TORQUE = "getLegHipJointTorque"
    GET_LEG_KNEE_JOINT_TORQUE = "getLegKneeJointTorque"

    GET_CURRENT_CTRLMODE = "getCurrentCtrlmode"
    GET_BATTERY_POWER = "getBatteryPower"


class ResultKind(Enum):
    NONE = "none"
    BOOL = "bool"
    INT = "int"
    STR = "str"
    VECTOR = "vector"


@dataclass(frozen=True)
class ResultSpec:
    """Where a command's result lives in the reply and what to return without it."""
    field: Optional[str]
    kind: ResultKind
    default: Any = None
    length: int = 0  # VECTOR only

    def default_value(self) -> Any:
        if self.kind is ResultKind.VECTOR:
            return [0.0] * self.length
        return self.default


@dataclass(frozen=True)
class CommandSpec:
    params: Tuple[str, ...]
    result: ResultSpec


_NO_RESULT = ResultSpec(None, ResultKind.NONE)
_SUCCESS   = ResultSpec("success", ResultKind.BOOL, False)
_CONNECTED = ResultSpec("connected", ResultKind.BOOL, False)
_MODE      = ResultSpec("mode", ResultKind.STR, "auto")
_RESULT    = ResultSpec("result", ResultKind.INT, 0)
_VALUE     = ResultSpec("value", ResultKind.INT, 0)
_VEC3      = ResultSpec("values", ResultKind.VECTOR, length=3)
_QUAT      = ResultSpec("values", ResultKind.VECTOR, length=4)
_LEGS      = ResultSpec("values", ResultKind.VECTOR, length=4)  # one entry per leg


COMMAND_TABLE: Dict[Command, CommandSpec] = {
    Command.REGISTER:             CommandSpec(("client_type",), _SUCCESS),
    Command.HEARTBEAT:            CommandSpec((), _SUCCESS),

    Command.SET_MODE:             CommandSpec(("mode",), _SUCCESS),
    Command.GET_CURRENT_MODE:     CommandSpec((), _MODE),

    Command.INIT_ROBOT:           CommandSpec(("local_ip", "local_port", "dog_ip"), _SUCCESS),
    Command.DEINIT_ROBOT:         CommandSpec((), _SUCCESS),
    Command.CHECK_CONNECT:        CommandSpec((), _CONNECTED),

    Command.STAND_UP:             CommandSpec((), _RESULT),
    Command.LIE_DOWN:             CommandSpec((), _RESULT),
    Command.PASSIVE:              CommandSpec((), _RESULT),
    Command.JUMP:                 CommandSpec((), _RESULT),
    Command.FRONT_JUMP:           CommandSpec((), _RESULT),
    Command.BACKFLIP:             CommandSpec((), _RESULT),
    Command.SHAKE_HAND:           CommandSpec((), _RESULT),

    Command.MOVE:                 CommandSpec(("vx", "vy", "yaw_rate"), _RESULT),
    Command.ATTITUDE_CONTROL:     CommandSpec(("roll_vel", "pitch_vel", "yaw_vel", "height_vel"), _RESULT),
    Command.TWO_LEG_STAND:        CommandSpec(("vx", "yaw_rate"), _RESULT),
    Command.CANCEL_TWO_LEG_STAND: CommandSpec((), _NO_RESULT),

    Command.GET_QUATERNION:       CommandSpec((), _QUAT),
    Command.GET_RPY:              CommandSpec((), _VEC3),
    Command.GET_BODY_ACC:         CommandSpec((), _VEC3),
    Command.GET_BODY_GYRO:        CommandSpec((), _VEC3),
    Command.GET_POSITION:         CommandSpec((), _VEC3),
    Command.GET_WORLD_VELOCITY:   CommandSpec((), _VEC3),
    Command.GET_BODY_VELOCITY:    CommandSpec((), _VEC3),

    Command.GET_LEG_ABAD_JOINT:        CommandSpec((), _LEGS),
    Command.GET_LEG_HIP_JOINT:         CommandSpec((), _LEGS),
    Command.GET_LEG_KNEE_JOINT:        CommandSpec((), _LEGS),
    Command.GET_LEG_ABAD_JOINT_VEL:    CommandSpec((), _LEGS),
    Command.GET_LEG_HIP_JOINT_VEL:     CommandSpec((), _LEGS),
    Command.GET_LEG_KNEE_JOINT_VEL:    CommandSpec((), _LEGS),
    Command.GET_LEG_ABAD_JOINT_TORQUE: CommandSpec((), _LEGS),
    Command.GET_LEG_HIP_JOINT_TORQUE:  CommandSpec((), _LEGS),
    Command.GET_LEG_KNEE_JOINT_TORQUE: CommandSpec((), _LEGS),

    Command.GET_CURRENT_CTRLMODE: CommandSpec((), _VALUE),
    Command.GET_BATTERY_POWER:    CommandSpec((), _VALUE),
}


# ---------- Envelopes ----------

@dataclass
class Request:
    command: Command
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {"command": self.command.value}
        if self.params:
            obj["params"] = dict(self.params)
        return obj


@dataclass
class Response:
    """
    Decoded reply envelope.

    `fields` holds everything except success/message. `error` is None for a
    genuine server reply and set for envelopes synthesized on the client side.
    """
    success: bool = False
    message: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    error: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Response":
        return cls(success=False, message=message, error=kind)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "Response":
        fields = {k: v for k, v in obj.items() if k not in ("success", "message")}
        message = obj.get("message")
        return cls(
            success=obj.get("success") is True,
            message=message if isinstance(message, str) else None,
            fields=fields,
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self.fields

    def to_dict(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {"success": self.success}
        if self.message is not None:
            obj["message"] = self.message
        obj.update(self.fields)
        return obj


# ---------- Encode / decode ----------

def build_request(command: Command, **params: Any) -> Request:
    """
    Build a request, checking params against COMMAND_TABLE.

    Raises ValueError for unknown or missing parameter names.
    """
    spec = COMMAND_TABLE[command]
    expected = set(spec.params)
    got = set(params)
    if got != expected:
        missing = sorted(expected - got)
        unknown = sorted(got - expected)
        raise ValueError(
            f"Bad params for {command.value}: missing={missing} unknown={unknown}"
        )
    return Request(command, {name: params[name] for name in spec.params})


def _wire_value(value: Any) -> Any:
    # non-finite floats have no JSON form; the service's serializer writes null
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def encode_request(request: Request) -> bytes:
    body = request.to_dict()
    if "params" in body:
        body["params"] = {k: _wire_value(v) for k, v in body["params"].items()}
    try:
        text = json.dumps(
            body,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Cannot encode {request.command.value}: {e}") from e
    return text.encode("utf-8")


def decode_request(data: bytes) -> Request:
    """Parse a request body (used on the service side and by test doubles)."""
    obj = _loads_object(data)
    try:
        command = Command(obj.get("command"))
    except ValueError as e:
        raise ProtocolError(f"Unknown command: {obj.get('command')!r}") from e
    params = obj.get("params") or {}
    if not isinstance(params, dict):
        raise ProtocolError(f"params must be an object, got {type(params).__name__}")
    return Request(command, params)


def decode_response(data: bytes) -> Response:
    """
    Parse a reply body.

    Raises ProtocolError when the body is not UTF-8 JSON or not a JSON object.
    """
    return Response.from_dict(_loads_object(data))


def _loads_object(data: bytes) -> Dict[str, Any]:
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"Invalid JSON body: {e}") from e
    if not isinstance(obj, dict):
        raise ProtocolError(f"Expected JSON object, got {type(obj).__name__}")
    return obj


# ---------- Default policy ----------

def _is_number(x: Any) -> bool:
    # json.loads accepts NaN and Infinity
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return False
    return math.isfinite(x)


def extract_result(command: Command, response: Response) -> Any:
    """
    Pull the command's result out of a response.

    A missing field, a value of the wrong type, or a vector of the wrong length
    all produce the table default. `success` is not consulted, so a rejected
    request and a legitimately zero result look the same here; callers that
    need to tell them apart inspect the Response itself.
    """
    spec = COMMAND_TABLE[command].result
    if spec.kind is ResultKind.NONE:
        return None

    if spec.field == "success":
        return response.success

    value = response.get(spec.field)
    if value is None:
        return spec.default_value()

    if spec.kind is ResultKind.BOOL and isinstance(value, bool):
        return value
    if spec.kind is ResultKind.INT and _is_number(value):
        return int(value)
    if spec.kind is ResultKind.STR and isinstance(value, str):
        return value
    if spec.kind is ResultKind.VECTOR and isinstance(value, list):
        if len(value) == spec.length and all(_is_number(v) for v in value):
            return [float(v) for v in value]

    logger.debug(
        "[protocol] %s: unusable %r field %r, using default",
        command.value, spec.field, value,
    )
    return spec.default_value()


# ---------- Identity / endpoints ----------

def make_identity(role: ClientRole, clock: Callable[[], int] = time.monotonic_ns) -> str:
    """Socket identity: '<rc|nav>_<monotonic ns>'."""
    return f"{role.tag}_{clock()}"


def endpoint_from(host: str, port: int) -> str:
    return f"tcp://{host}:{int(port)}"
