"""Async client for the Serum order-book API over HTTP, WebSocket and gRPC."""

from .client import SerumClient
from .config import ClientOptions, ConfigurationError, Endpoints, TransportKind
from .errors import (
    DecodeError,
    PartialBatchFailure,
    PrivateKeyNotFoundError,
    RemoteError,
    SerumClientError,
    SerumConnectionError,
    SerumTimeoutError,
    SigningError,
    StreamClosedError,
    StreamingNotSupportedError,
)
from .factories import (
    new_grpc_client,
    new_grpc_client_with_opts,
    new_grpc_testnet,
    new_http_client,
    new_http_client_with_opts,
    new_http_testnet,
    new_ws_client,
    new_ws_client_with_opts,
    new_ws_testnet,
)
from .models import OrderStatus, OrderType, PostOrderOpts, Side
from .signing import Ed25519TransactionSigner, Signer
from .transport import Subscription

__all__ = [
    "ClientOptions",
    "ConfigurationError",
    "DecodeError",
    "Ed25519TransactionSigner",
    "Endpoints",
    "OrderStatus",
    "OrderType",
    "PartialBatchFailure",
    "PostOrderOpts",
    "PrivateKeyNotFoundError",
    "RemoteError",
    "SerumClient",
    "SerumClientError",
    "SerumConnectionError",
    "SerumTimeoutError",
    "Side",
    "Signer",
    "SigningError",
    "StreamClosedError",
    "StreamingNotSupportedError",
    "Subscription",
    "TransportKind",
    "new_grpc_client",
    "new_grpc_client_with_opts",
    "new_grpc_testnet",
    "new_http_client",
    "new_http_client_with_opts",
    "new_http_testnet",
    "new_ws_client",
    "new_ws_client_with_opts",
    "new_ws_testnet",
]
