"""WebSocket JSON-RPC transport."""

from .connection import ConnectionState, WSConnection
from .transport import WSTransport

__all__ = ["ConnectionState", "WSConnection", "WSTransport"]
