"""gRPC transport."""

from .codec import JsonCodec, MessageCodec
from .transport import SERVICE_NAME, GRPCTransport, map_rpc_error, method_path

__all__ = ["GRPCTransport", "JsonCodec", "MessageCodec", "SERVICE_NAME", "map_rpc_error", "method_path"]
