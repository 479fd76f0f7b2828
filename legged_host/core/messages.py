from enum import Enum


class ClientRole(Enum):
    """
    Who is talking to the service.

    value = wire name sent in the register command
    tag   = prefix of the socket identity
    """
    CONTROLLER = "remote_controller"
    NAVIGATOR  = "navigation"

    @property
    def tag(self) -> str:
        return "rc" if self is ClientRole.CONTROLLER else "nav"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED    = "connected"


class RobotMode(str, Enum):
    AUTO   = "auto"     # navigation drives the robot
    MANUAL = "manual"   # remote controller drives the robot
