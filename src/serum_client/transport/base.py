"""Transport-neutral request description and the contract every transport implements."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Protocol, Type, TypeVar

if TYPE_CHECKING:
    from .stream import Subscription

T = TypeVar("T")


class Operation(Enum):
    """Named operations of the remote API; the value is the RPC method name."""

    GET_ORDERBOOK = "GetOrderbook"
    GET_ORDERBOOKS_STREAM = "GetOrderbooksStream"
    GET_TRADES = "GetTrades"
    GET_TRADES_STREAM = "GetTradesStream"
    GET_ORDER_STATUS_STREAM = "GetOrderStatusStream"
    GET_TICKERS = "GetTickers"
    GET_OPEN_ORDERS = "GetOpenOrders"
    GET_UNSETTLED = "GetUnsettled"
    GET_ACCOUNT_BALANCE = "GetAccountBalance"
    GET_MARKETS = "GetMarkets"
    POST_ORDER = "PostOrder"
    POST_SUBMIT = "PostSubmit"
    POST_CANCEL_ORDER = "PostCancelOrder"
    POST_CANCEL_BY_CLIENT_ORDER_ID = "PostCancelByClientOrderID"
    POST_CANCEL_ALL = "PostCancelAll"
    POST_SETTLE = "PostSettle"

    @property
    def method_name(self) -> str:
        return self.value


@dataclass(frozen=True)
class Request:
    """One call to the remote API. Built fresh per call and never reused.

    ``params`` uses the service's JSON field names. ``None`` values are
    dropped by ``wire_params``; falsy values such as ``limit=0`` are kept.
    """

    operation: Operation
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.operation.method_name

    def wire_params(self) -> Dict[str, Any]:
        return {key: value for key, value in self.params.items() if value is not None}


class Transport(Protocol):
    """Unary and streaming primitives shared by the HTTP, WebSocket and gRPC clients."""

    name: str

    async def unary(self, request: Request, shape: Type[T]) -> T:
        """Send ``request`` and decode the single reply as ``shape``."""
        ...

    async def stream(
        self,
        request: Request,
        shape: Type[T],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> "Subscription[T]":
        """Open a server-push subscription yielding ``shape`` values."""
        ...

    async def close(self) -> None:
        """Release connections and stop any background tasks."""
        ...


__all__ = ["Operation", "Request", "Transport"]
