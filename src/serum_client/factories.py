"""Constructors for ready-to-use clients on mainnet, testnet or a custom endpoint."""

from __future__ import annotations

import logging
from typing import Optional

from .client import SerumClient
from .config import ClientOptions, Endpoints, TransportKind, default_client_options
from .signing import signer_from_options
from .transport.grpc import GRPCTransport, MessageCodec
from .transport.http import HTTPTransport
from .transport.ws import WSTransport

logger = logging.getLogger(__name__)


def new_http_client() -> SerumClient:
    """HTTP client for mainnet, configured from the environment."""
    return new_http_client_with_opts(default_client_options(Endpoints.mainnet(TransportKind.HTTP)))


def new_http_testnet() -> SerumClient:
    return new_http_client_with_opts(default_client_options(Endpoints.testnet(TransportKind.HTTP)))


def new_http_client_with_opts(opts: ClientOptions) -> SerumClient:
    logger.debug("Creating HTTP client for %s", opts.endpoint)
    return SerumClient(HTTPTransport(opts), signer_from_options(opts))


async def new_ws_client() -> SerumClient:
    """WebSocket client for mainnet; the socket is open when this returns."""
    return await new_ws_client_with_opts(default_client_options(Endpoints.mainnet(TransportKind.WS)))


async def new_ws_testnet() -> SerumClient:
    return await new_ws_client_with_opts(default_client_options(Endpoints.testnet(TransportKind.WS)))


async def new_ws_client_with_opts(opts: ClientOptions) -> SerumClient:
    signer = signer_from_options(opts)
    transport = WSTransport(opts)
    await transport.connect()
    return SerumClient(transport, signer)


def new_grpc_client() -> SerumClient:
    """gRPC client for mainnet. The channel connects lazily on first call.

    The default codec speaks protobuf-JSON field names as JSON bytes. The live
    ``api.Api`` service expects protobuf bytes, so production use needs a
    protobuf ``MessageCodec`` passed to ``new_grpc_client_with_opts``.
    """
    return new_grpc_client_with_opts(default_client_options(Endpoints.mainnet(TransportKind.GRPC)))


def new_grpc_testnet() -> SerumClient:
    return new_grpc_client_with_opts(default_client_options(Endpoints.testnet(TransportKind.GRPC)))


def new_grpc_client_with_opts(opts: ClientOptions, *, codec: Optional[MessageCodec] = None) -> SerumClient:
    """gRPC client for ``opts``; ``codec`` replaces the default JSON codec."""
    logger.debug("Creating gRPC client for %s", opts.endpoint)
    return SerumClient(GRPCTransport(opts, codec=codec), signer_from_options(opts))


__all__ = [
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
