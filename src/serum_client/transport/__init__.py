"""Transport clients for the Serum API."""

from .base import Operation, Request, Transport
from .grpc import GRPCTransport, JsonCodec
from .http import HTTPTransport
from .stream import Subscription
from .ws import WSTransport

__all__ = [
    "GRPCTransport",
    "HTTPTransport",
    "JsonCodec",
    "Operation",
    "Request",
    "Subscription",
    "Transport",
    "WSTransport",
]
