"""
Market data response models: orderbooks, trades, tickers and markets.

Each model decodes from the service's JSON with ``from_dict`` and encodes back
with ``to_dict``; decoding then re-encoding preserves every field value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ._fields import (
    dump_optional,
    object_item,
    read_bool,
    read_enum,
    read_float,
    read_int,
    read_list,
    read_object,
    read_str,
    require_mapping,
)
from .enums import Side


@dataclass
class OrderbookItem:
    """One price level"""

    price: float = 0.0
    size: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OrderbookItem":
        return cls(price=read_float(payload, "price"), size=read_float(payload, "size"))

    def to_dict(self) -> Dict[str, Any]:
        return {"price": self.price, "size": self.size}


@dataclass
class GetOrderbookResponse:
    """Bids and asks for one market. An empty side means no resting orders."""

    market: str = ""
    market_address: str = ""
    bids: List[OrderbookItem] = field(default_factory=list)
    asks: List[OrderbookItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetOrderbookResponse":
        return cls(
            market=read_str(payload, "market"),
            market_address=read_str(payload, "marketAddress"),
            bids=read_list(payload, "bids", object_item(OrderbookItem.from_dict, "bids")),
            asks=read_list(payload, "asks", object_item(OrderbookItem.from_dict, "asks")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "marketAddress": self.market_address,
            "bids": [item.to_dict() for item in self.bids],
            "asks": [item.to_dict() for item in self.asks],
        }


@dataclass
class GetOrderbooksStreamResponse:
    slot: int = 0
    orderbook: Optional[GetOrderbookResponse] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetOrderbooksStreamResponse":
        return cls(
            slot=read_int(payload, "slot"),
            orderbook=read_object(payload, "orderbook", GetOrderbookResponse.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"slot": str(self.slot), "orderbook": dump_optional(self.orderbook)}


@dataclass
class Trade:
    side: Side = Side.S_UNKNOWN
    size: float = 0.0
    price: float = 0.0
    address: str = ""
    order_id: str = ""
    is_maker: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Trade":
        return cls(
            side=read_enum(payload, "side", Side),
            size=read_float(payload, "size"),
            price=read_float(payload, "price"),
            address=read_str(payload, "address"),
            order_id=read_str(payload, "orderID"),
            is_maker=read_bool(payload, "isMaker"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "side": self.side.name,
            "size": self.size,
            "price": self.price,
            "address": self.address,
            "orderID": self.order_id,
            "isMaker": self.is_maker,
        }


@dataclass
class GetTradesResponse:
    trades: List[Trade] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetTradesResponse":
        return cls(trades=read_list(payload, "trades", object_item(Trade.from_dict, "trades")))

    def to_dict(self) -> Dict[str, Any]:
        return {"trades": [trade.to_dict() for trade in self.trades]}


@dataclass
class GetTradesStreamResponse:
    slot: int = 0
    trades: Optional[GetTradesResponse] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetTradesStreamResponse":
        return cls(
            slot=read_int(payload, "slot"),
            trades=read_object(payload, "trades", GetTradesResponse.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"slot": str(self.slot), "trades": dump_optional(self.trades)}


@dataclass
class Ticker:
    market: str = ""
    market_address: str = ""
    bid: float = 0.0
    bid_size: float = 0.0
    ask: float = 0.0
    ask_size: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Ticker":
        return cls(
            market=read_str(payload, "market"),
            market_address=read_str(payload, "marketAddress"),
            bid=read_float(payload, "bid"),
            bid_size=read_float(payload, "bidSize"),
            ask=read_float(payload, "ask"),
            ask_size=read_float(payload, "askSize"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "marketAddress": self.market_address,
            "bid": self.bid,
            "bidSize": self.bid_size,
            "ask": self.ask,
            "askSize": self.ask_size,
        }


@dataclass
class GetTickersResponse:
    tickers: List[Ticker] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetTickersResponse":
        return cls(tickers=read_list(payload, "tickers", object_item(Ticker.from_dict, "tickers")))

    def to_dict(self) -> Dict[str, Any]:
        return {"tickers": [ticker.to_dict() for ticker in self.tickers]}


@dataclass
class Market:
    market: str = ""
    status: str = ""
    address: str = ""
    base_mint: str = ""
    quoted_mint: str = ""
    base_decimals: int = 0
    quote_decimals: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Market":
        return cls(
            market=read_str(payload, "market"),
            status=read_str(payload, "status"),
            address=read_str(payload, "address"),
            base_mint=read_str(payload, "baseMint"),
            quoted_mint=read_str(payload, "quotedMint"),
            base_decimals=read_int(payload, "baseDecimals"),
            quote_decimals=read_int(payload, "quoteDecimals"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "status": self.status,
            "address": self.address,
            "baseMint": self.base_mint,
            "quotedMint": self.quoted_mint,
            "baseDecimals": str(self.base_decimals),
            "quoteDecimals": str(self.quote_decimals),
        }


@dataclass
class GetMarketsResponse:
    """All named markets, keyed by market name"""

    markets: Dict[str, Market] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetMarketsResponse":
        raw = payload.get("markets")
        if raw is None:
            return cls()
        raw = require_mapping(raw, "markets")
        return cls(markets={str(name): Market.from_dict(require_mapping(entry, f"markets.{name}")) for name, entry in raw.items()})

    def to_dict(self) -> Dict[str, Any]:
        return {"markets": {name: market.to_dict() for name, market in self.markets.items()}}


__all__ = [
    "GetMarketsResponse",
    "GetOrderbookResponse",
    "GetOrderbooksStreamResponse",
    "GetTickersResponse",
    "GetTradesResponse",
    "GetTradesStreamResponse",
    "Market",
    "OrderbookItem",
    "Ticker",
    "Trade",
]
