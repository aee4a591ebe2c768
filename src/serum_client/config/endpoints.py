"""Endpoint defaults and per-client options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .environment import DEFAULT_RPC_TIMEOUT_SECONDS, EnvironmentSettings
from .errors import ConfigurationError

if TYPE_CHECKING:
    from ..signing import Signer


class TransportKind(Enum):
    """Wire protocol used by a client."""

    HTTP = "http"
    WS = "ws"
    GRPC = "grpc"


class Endpoints:
    """Pre-set remote environments per transport."""

    MAINNET_HTTP = "https://virginia.solana.dex.blxrbdn.com"
    MAINNET_WS = "wss://virginia.solana.dex.blxrbdn.com/ws"
    MAINNET_GRPC = "virginia.solana.dex.blxrbdn.com:9000"
    TESTNET_HTTP = "http://serum-nlb-53baf45ef9775263.elb.us-east-1.amazonaws.com"
    TESTNET_WS = "ws://serum-nlb-53baf45ef9775263.elb.us-east-1.amazonaws.com/ws"
    TESTNET_GRPC = "serum-nlb-53baf45ef9775263.elb.us-east-1.amazonaws.com:9000"

    @classmethod
    def mainnet(cls, kind: TransportKind) -> str:
        return {
            TransportKind.HTTP: cls.MAINNET_HTTP,
            TransportKind.WS: cls.MAINNET_WS,
            TransportKind.GRPC: cls.MAINNET_GRPC,
        }[kind]

    @classmethod
    def testnet(cls, kind: TransportKind) -> str:
        return {
            TransportKind.HTTP: cls.TESTNET_HTTP,
            TransportKind.WS: cls.TESTNET_WS,
            TransportKind.GRPC: cls.TESTNET_GRPC,
        }[kind]


@dataclass(frozen=True)
class ClientOptions:
    """Configuration for one client instance; immutable for its lifetime.

    ``private_key`` is a base58 Solana keypair (or 32-byte seed). A custom
    ``signer`` takes precedence over ``private_key`` when both are given.
    Neither is required to construct a client; only sign-and-submit calls
    need one.
    """

    endpoint: str
    timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS
    private_key: Optional[str] = None
    signer: Optional["Signer"] = None

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ConfigurationError.missing_value("endpoint")
        if self.timeout_seconds <= 0:
            raise ConfigurationError.invalid_value("timeout_seconds", self.timeout_seconds, "Timeout must be positive")

    @property
    def has_signing_key(self) -> bool:
        return self.signer is not None or bool(self.private_key)


def default_client_options(endpoint: str) -> ClientOptions:
    """Build options for ``endpoint`` from ``EnvironmentSettings``.

    A missing ``PRIVATE_KEY`` is not an error here; write paths report it when
    they are first used.
    """
    settings = EnvironmentSettings.load()
    return ClientOptions(
        endpoint=endpoint,
        timeout_seconds=settings.timeout_seconds,
        private_key=settings.private_key,
    )


__all__ = [
    "ClientOptions",
    "Endpoints",
    "TransportKind",
    "default_client_options",
]
