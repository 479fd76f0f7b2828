# legged_host/core/commands.py
"""
One method per high-level service command.

Every method is a single round trip. Results fall back to the defaults in
protocol.COMMAND_TABLE when the reply is missing, rejected or malformed:
False for flags, 0 for codes/values, "auto" for the mode and all-zero vectors
for sensor readings.
"""

from __future__ import annotations

from typing import List, Union

from .messages import ClientRole, RobotMode
from .protocol import DEFAULT_DOG_IP, Command


class LeggedCommandsMixin:
    """Requires `role`, `request()`, `_query()` and `_reject()` from the host class."""

    # ---------- Session / mode ----------

    def heartbeat(self) -> bool:
        return self._query(Command.HEARTBEAT)

    def set_mode(self, mode: Union[RobotMode, str]) -> bool:
        """Switch auto/manual. Only a CONTROLLER client may do this."""
        if self.role is not ClientRole.CONTROLLER:
            return self._reject(Command.SET_MODE, "only the remote controller client may set the mode")
        value = mode.value if isinstance(mode, RobotMode) else str(mode)
        return self._query(Command.SET_MODE, mode=value)

    def get_current_mode(self) -> str:
        return self._query(Command.GET_CURRENT_MODE)

    # ---------- Robot lifecycle ----------

    def init_robot(self, local_ip: str, local_port: int, dog_ip: str = DEFAULT_DOG_IP) -> bool:
        return self._query(
            Command.INIT_ROBOT,
            local_ip=str(local_ip),
            local_port=int(local_port),
            dog_ip=str(dog_ip),
        )

    def deinit_robot(self) -> bool:
        return self._query(Command.DEINIT_ROBOT)

    def check_connect(self) -> bool:
        """True when the service reports a live link to the robot."""
        return self._query(Command.CHECK_CONNECT)

    # ---------- Posture (result codes) ----------

    def stand_up(self) -> int:
        return self._query(Command.STAND_UP)

    def lie_down(self) -> int:
        return self._query(Command.LIE_DOWN)

    def passive(self) -> int:
        return self._query(Command.PASSIVE)

    def jump(self) -> int:
        return self._query(Command.JUMP)

    def front_jump(self) -> int:
        return self._query(Command.FRONT_JUMP)

    def backflip(self) -> int:
        return self._query(Command.BACKFLIP)

    def shake_hand(self) -> int:
        return self._query(Command.SHAKE_HAND)

    # ---------- Motion ----------

    def move(self, vx: float, vy: float, yaw_rate: float) -> int:
        return self._query(Command.MOVE, vx=float(vx), vy=float(vy), yaw_rate=float(yaw_rate))

    def attitude_control(
        self,
        roll_vel: float,
        pitch_vel: float,
        yaw_vel: float,
        height_vel: float,
    ) -> int:
        return self._query(
            Command.ATTITUDE_CONTROL,
            roll_vel=float(roll_vel),
            pitch_vel=float(pitch_vel),
            yaw_vel=float(yaw_vel),
            height_vel=float(height_vel),
        )

    def two_leg_stand(self, vx: float = 0.0, yaw_rate: float = 0.0) -> int:
        return self._query(Command.TWO_LEG_STAND, vx=float(vx), yaw_rate=float(yaw_rate))

    def cancel_two_leg_stand(self) -> None:
        # reply is read to keep request/reply in step, then dropped
        self.request(Command.CANCEL_TWO_LEG_STAND)

    # ---------- Body state ----------

    def get_quaternion(self) -> List[float]:
        return self._query(Command.GET_QUATERNION)

    def get_rpy(self) -> List[float]:
        return self._query(Command.GET_RPY)

    def get_body_acc(self) -> List[float]:
        return self._query(Command.GET_BODY_ACC)

    def get_body_gyro(self) -> List[float]:
        return self._query(Command.GET_BODY_GYRO)

    def get_position(self) -> List[float]:
        return self._query(Command.GET_POSITION)

    def get_world_velocity(self) -> List[float]:
        return self._query(Command.GET_WORLD_VELOCITY)

    def get_body_velocity(self) -> List[float]:
        return self._query(Command.GET_BODY_VELOCITY)

    # ---------- Joint state (one value per leg) ----------

    def get_leg_abad_joint(self) -> List[float]:
        return self._query(Command.GET_LEG_ABAD_JOINT)

    def get_leg_hip_joint(self) -> List[float]:
        return self._query(Command.GET_LEG_HIP_JOINT)

    def get_leg_knee_joint(self) -> List[float]:
        return self._query(Command.GET_LEG_KNEE_JOINT)

    def get_leg_abad_joint_vel(self) -> List[float]:
        return self._query(Command.GET_LEG_ABAD_JOINT_VEL)

    def get_leg_hip_joint_vel(self) -> List[float]:
        return self._query(Command.GET_LEG_HIP_JOINT_VEL)

    def get_leg_knee_joint_vel(self) -> List[float]:
        return self._query(Command.GET_LEG_KNEE_JOINT_VEL)

    def get_leg_abad_joint_torque(self) -> List[float]:
        return self._query(Command.GET_LEG_ABAD_JOINT_TORQUE)

    def get_leg_hip_joint_torque(self) -> List[float]:
        return self._query(Command.GET_LEG_HIP_JOINT_TORQUE)

    def get_leg_knee_joint_torque(self) -> List[float]:
        return self._query(Command.GET_LEG_KNEE_JOINT_TORQUE)

    # ---------- Status ----------

    def get_current_ctrlmode(self) -> int:
        return self._query(Command.GET_CURRENT_CTRLMODE)

    def get_battery_power(self) -> int:
        return self._query(Command.GET_BATTERY_POWER)
