# legged_host/transport/__init__.py
# Byte-level transports used by the session:
#   from legged_host.transport.base_transport import BaseTransport
#   from legged_host.transport.zmq_transport import ZmqTransport
