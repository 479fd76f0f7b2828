# legged_host: synchronous request/reply client for the legged-robot high-level service.
#   from legged_host.core.client import HighLevelClient
#   from legged_host.core.session import Session
#   from legged_host.core.robot_runtime import build_client
