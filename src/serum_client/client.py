"""Trading facade over any Serum transport."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar, Union

from .models import (
    GetAccountBalanceResponse,
    GetMarketsResponse,
    GetOpenOrdersResponse,
    GetOrderbookResponse,
    GetOrderbooksStreamResponse,
    GetOrderStatusStreamResponse,
    GetTickersResponse,
    GetTradesResponse,
    GetTradesStreamResponse,
    GetUnsettledResponse,
    OrderType,
    PostCancelAllResponse,
    PostCancelOrderResponse,
    PostOrderOpts,
    PostOrderResponse,
    PostSettleResponse,
    PostSubmitResponse,
    Side,
)
from .models._fields import parse_enum
from .orchestrator import TransactionSubmitter
from .signing import Signer
from .transport.base import Operation, Request, Transport
from .transport.stream import Subscription

__all__ = ["SerumClient"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

SideLike = Union[Side, str, int]
OrderTypeLike = Union[OrderType, str, int]


def _require_market(market: str, name: str = "market") -> str:
    if not market:
        raise ValueError(f"{name} must not be empty")
    return market


def _require_limit(limit: int) -> int:
    if limit < 0:
        raise ValueError("limit must be non-negative (0 means no limit)")
    return limit


def _require_transaction(transaction: str) -> str:
    if not transaction:
        raise ValueError("transaction must not be empty")
    return transaction


class SerumClient:
    """Market data, order building and sign-and-submit flows over one transport.

    The same methods work over HTTP, WebSocket and gRPC; stream methods need
    a streaming transport. ``submit_*`` methods need a signer, ``post_*``
    builders do not.
    """

    def __init__(self, transport: Transport, signer: Optional[Signer] = None) -> None:
        self._transport = transport
        self._signer = signer
        self._submitter = TransactionSubmitter(self._submit_signed, signer)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def signer(self) -> Optional[Signer]:
        return self._signer

    async def _call(self, operation: Operation, shape: Type[T], **params: Any) -> T:
        return await self._transport.unary(Request(operation, params), shape)

    async def _open_stream(
        self,
        operation: Operation,
        shape: Type[T],
        cancel_event: Optional[asyncio.Event],
        **params: Any,
    ) -> Subscription[T]:
        return await self._transport.stream(Request(operation, params), shape, cancel_event=cancel_event)

    # Market data

    async def get_orderbook(self, market: str, limit: int = 0) -> GetOrderbookResponse:
        """Bids and asks for ``market``; ``limit=0`` returns every level."""
        return await self._call(
            Operation.GET_ORDERBOOK,
            GetOrderbookResponse,
            market=_require_market(market),
            limit=_require_limit(limit),
        )

    async def get_trades(self, market: str, limit: int = 0) -> GetTradesResponse:
        return await self._call(
            Operation.GET_TRADES,
            GetTradesResponse,
            market=_require_market(market),
            limit=_require_limit(limit),
        )

    async def get_tickers(self, market: str = "") -> GetTickersResponse:
        """Tickers for ``market``, or for every market when it is empty."""
        return await self._call(Operation.GET_TICKERS, GetTickersResponse, market=market)

    async def get_markets(self) -> GetMarketsResponse:
        return await self._call(Operation.GET_MARKETS, GetMarketsResponse)

    # Account data

    async def get_open_orders(self, market: str, owner: str) -> GetOpenOrdersResponse:
        return await self._call(
            Operation.GET_OPEN_ORDERS,
            GetOpenOrdersResponse,
            market=_require_market(market),
            address=owner,
        )

    async def get_unsettled(self, market: str, owner: str) -> GetUnsettledResponse:
        return await self._call(
            Operation.GET_UNSETTLED,
            GetUnsettledResponse,
            market=_require_market(market),
            owner=owner,
        )

    async def get_account_balance(self, owner: str) -> GetAccountBalanceResponse:
        return await self._call(Operation.GET_ACCOUNT_BALANCE, GetAccountBalanceResponse, ownerAddress=owner)

    # Streams

    async def get_orderbooks_stream(
        self,
        markets: Sequence[str],
        limit: int = 0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Subscription[GetOrderbooksStreamResponse]:
        """Subscribe to orderbook updates for every market in ``markets``."""
        if isinstance(markets, str):
            markets = [markets]
        market_list = [_require_market(market, "markets entry") for market in markets]
        if not market_list:
            raise ValueError("markets must contain at least one market")
        return await self._open_stream(
            Operation.GET_ORDERBOOKS_STREAM,
            GetOrderbooksStreamResponse,
            cancel_event,
            markets=market_list,
            limit=_require_limit(limit),
        )

    async def get_trades_stream(
        self,
        market: str,
        limit: int = 0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Subscription[GetTradesStreamResponse]:
        return await self._open_stream(
            Operation.GET_TRADES_STREAM,
            GetTradesStreamResponse,
            cancel_event,
            market=_require_market(market),
            limit=_require_limit(limit),
        )

    async def get_order_status_stream(
        self,
        market: str,
        owner: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Subscription[GetOrderStatusStreamResponse]:
        return await self._open_stream(
            Operation.GET_ORDER_STATUS_STREAM,
            GetOrderStatusStreamResponse,
            cancel_event,
            market=_require_market(market),
            ownerAddress=owner,
        )

    # Transaction builders

    async def post_order(
        self,
        owner: str,
        payer: str,
        market: str,
        side: SideLike,
        types: Iterable[OrderTypeLike],
        amount: float,
        price: float,
        opts: Optional[PostOrderOpts] = None,
    ) -> PostOrderResponse:
        """Build an unsigned order placement transaction."""
        opts = opts if opts is not None else PostOrderOpts()
        params: Dict[str, Any] = {
            "ownerAddress": owner,
            "payerAddress": payer,
            "market": _require_market(market),
            "side": parse_enum(side, Side, "side").name,
            "type": [parse_enum(order_type, OrderType, "type").name for order_type in types],
            "amount": amount,
            "price": price,
            "openOrdersAddress": opts.open_orders_address,
            "clientOrderID": str(opts.client_order_id),
        }
        return await self._call(Operation.POST_ORDER, PostOrderResponse, **params)

    async def post_submit(self, transaction: str, skip_pre_flight: bool = False) -> PostSubmitResponse:
        """Submit an already-signed transaction."""
        return await self._call(
            Operation.POST_SUBMIT,
            PostSubmitResponse,
            transaction=_require_transaction(transaction),
            skipPreFlight=skip_pre_flight,
        )

    async def post_cancel_order(
        self,
        order_id: str,
        side: SideLike,
        owner: str,
        market: str,
        open_orders: str,
    ) -> PostCancelOrderResponse:
        return await self._call(
            Operation.POST_CANCEL_ORDER,
            PostCancelOrderResponse,
            orderID=order_id,
            side=parse_enum(side, Side, "side").name,
            ownerAddress=owner,
            marketAddress=_require_market(market),
            openOrdersAddress=open_orders,
        )

    async def post_cancel_by_client_order_id(
        self,
        client_order_id: int,
        owner: str,
        market: str,
        open_orders: str,
    ) -> PostCancelOrderResponse:
        if client_order_id < 0:
            raise ValueError("client_order_id must be non-negative")
        return await self._call(
            Operation.POST_CANCEL_BY_CLIENT_ORDER_ID,
            PostCancelOrderResponse,
            clientOrderID=str(client_order_id),
            ownerAddress=owner,
            marketAddress=_require_market(market),
            openOrdersAddress=open_orders,
        )

    async def post_cancel_all(
        self,
        market: str,
        owner: str,
        open_orders_addresses: Sequence[str] = (),
    ) -> PostCancelAllResponse:
        """Build the cancel transactions for every open order of ``owner`` in ``market``."""
        return await self._call(
            Operation.POST_CANCEL_ALL,
            PostCancelAllResponse,
            market=_require_market(market),
            ownerAddress=owner,
            openOrdersAddresses=list(open_orders_addresses),
        )

    async def post_settle(
        self,
        owner: str,
        market: str,
        base_token_wallet: str,
        quote_token_wallet: str,
        open_orders_account: str,
    ) -> PostSettleResponse:
        return await self._call(
            Operation.POST_SETTLE,
            PostSettleResponse,
            ownerAddress=owner,
            market=_require_market(market),
            baseTokenWallet=base_token_wallet,
            quoteTokenWallet=quote_token_wallet,
            openOrdersAddress=open_orders_account,
        )

    # Sign and submit

    async def _submit_signed(self, signed_transaction: str, skip_pre_flight: bool) -> str:
        response = await self.post_submit(signed_transaction, skip_pre_flight)
        return response.signature

    async def submit_order(
        self,
        owner: str,
        payer: str,
        market: str,
        side: SideLike,
        types: Iterable[OrderTypeLike],
        amount: float,
        price: float,
        opts: Optional[PostOrderOpts] = None,
    ) -> str:
        """Build, sign and submit an order; returns the transaction signature."""
        self._submitter.require_signer("submit_order")
        opts = opts if opts is not None else PostOrderOpts()
        order = await self.post_order(owner, payer, market, side, types, amount, price, opts)
        return await self._submitter.submit_one(order.transaction, opts.skip_pre_flight, operation_name="submit_order")

    async def submit_cancel_order(
        self,
        order_id: str,
        side: SideLike,
        owner: str,
        market: str,
        open_orders: str,
        skip_pre_flight: bool = False,
    ) -> str:
        self._submitter.require_signer("submit_cancel_order")
        order = await self.post_cancel_order(order_id, side, owner, market, open_orders)
        return await self._submitter.submit_one(order.transaction, skip_pre_flight, operation_name="submit_cancel_order")

    async def submit_cancel_by_client_order_id(
        self,
        client_order_id: int,
        owner: str,
        market: str,
        open_orders: str,
        skip_pre_flight: bool = False,
    ) -> str:
        self._submitter.require_signer("submit_cancel_by_client_order_id")
        order = await self.post_cancel_by_client_order_id(client_order_id, owner, market, open_orders)
        return await self._submitter.submit_one(
            order.transaction,
            skip_pre_flight,
            operation_name="submit_cancel_by_client_order_id",
        )

    async def submit_cancel_all(
        self,
        market: str,
        owner: str,
        open_orders_addresses: Sequence[str] = (),
        skip_pre_flight: bool = False,
    ) -> List[str]:
        """Cancel every open order; returns one signature per cancel transaction.

        Raises ``PartialBatchFailure`` carrying the signatures that did go
        through when a transaction fails part way.
        """
        self._submitter.require_signer("submit_cancel_all")
        orders = await self.post_cancel_all(market, owner, open_orders_addresses)
        logger.debug("submit_cancel_all received %d transaction(s) for %s", len(orders.transactions), market)
        result = await self._submitter.submit_many(orders.transactions, skip_pre_flight, operation_name="submit_cancel_all")
        return result.raise_for_error("submit_cancel_all")

    async def submit_settle(
        self,
        owner: str,
        market: str,
        base_token_wallet: str,
        quote_token_wallet: str,
        open_orders_account: str,
        skip_pre_flight: bool = False,
    ) -> str:
        self._submitter.require_signer("submit_settle")
        settle = await self.post_settle(owner, market, base_token_wallet, quote_token_wallet, open_orders_account)
        return await self._submitter.submit_one(settle.transaction, skip_pre_flight, operation_name="submit_settle")

    # Lifecycle

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "SerumClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
