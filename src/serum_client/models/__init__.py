"""Typed request options and response shapes for the Serum API."""

from .account import (
    GetAccountBalanceResponse,
    GetOpenOrdersResponse,
    GetOrderStatusStreamResponse,
    GetUnsettledResponse,
    Order,
    OrderStatusInfo,
    TokenAmount,
    TokenBalance,
    UnsettledRow,
)
from .enums import OrderStatus, OrderType, Side
from .market_data import (
    GetMarketsResponse,
    GetOrderbookResponse,
    GetOrderbooksStreamResponse,
    GetTickersResponse,
    GetTradesResponse,
    GetTradesStreamResponse,
    Market,
    OrderbookItem,
    Ticker,
    Trade,
)
from .transactions import (
    ErrorResult,
    PostCancelAllResponse,
    PostCancelOrderResponse,
    PostOrderOpts,
    PostOrderResponse,
    PostSettleResponse,
    PostSubmitResponse,
)

__all__ = [
    "ErrorResult",
    "GetAccountBalanceResponse",
    "GetMarketsResponse",
    "GetOpenOrdersResponse",
    "GetOrderStatusStreamResponse",
    "GetOrderbookResponse",
    "GetOrderbooksStreamResponse",
    "GetTickersResponse",
    "GetTradesResponse",
    "GetTradesStreamResponse",
    "GetUnsettledResponse",
    "Market",
    "Order",
    "OrderStatus",
    "OrderStatusInfo",
    "OrderType",
    "OrderbookItem",
    "PostCancelAllResponse",
    "PostCancelOrderResponse",
    "PostOrderOpts",
    "PostOrderResponse",
    "PostSettleResponse",
    "PostSubmitResponse",
    "Side",
    "Ticker",
    "TokenAmount",
    "TokenBalance",
    "Trade",
    "UnsettledRow",
]
