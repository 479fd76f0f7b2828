# legged_host/core/__init__.py
# Envelope protocol, session, command facade and runtime wiring.
# Use explicit imports:
#   from legged_host.core.protocol import Command, build_request
#   from legged_host.core.session import Session
#   from legged_host.core.client import HighLevelClient
