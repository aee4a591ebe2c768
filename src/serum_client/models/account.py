"""Account-scoped response models: open orders, unsettled funds, balances, order status."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ._fields import (
    dump_optional,
    object_item,
    parse_enum,
    read_enum,
    read_float,
    read_int,
    read_list,
    read_object,
    read_str,
)
from .enums import OrderStatus, OrderType, Side


@dataclass
class Order:
    order_id: str = ""
    market: str = ""
    side: Side = Side.S_UNKNOWN
    types: List[OrderType] = field(default_factory=list)
    price: float = 0.0
    size: float = 0.0
    remaining_size: float = 0.0
    created_at: str = ""
    client_order_id: int = 0
    open_order_account: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Order":
        return cls(
            order_id=read_str(payload, "orderID"),
            market=read_str(payload, "market"),
            side=read_enum(payload, "side", Side),
            types=read_list(payload, "types", lambda value: parse_enum(value, OrderType, "types")),
            price=read_float(payload, "price"),
            size=read_float(payload, "size"),
            remaining_size=read_float(payload, "remainingSize"),
            created_at=read_str(payload, "createdAt"),
            client_order_id=read_int(payload, "clientOrderID"),
            open_order_account=read_str(payload, "openOrderAccount"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderID": self.order_id,
            "market": self.market,
            "side": self.side.name,
            "types": [order_type.name for order_type in self.types],
            "price": self.price,
            "size": self.size,
            "remainingSize": self.remaining_size,
            "createdAt": self.created_at,
            "clientOrderID": str(self.client_order_id),
            "openOrderAccount": self.open_order_account,
        }


@dataclass
class GetOpenOrdersResponse:
    orders: List[Order] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetOpenOrdersResponse":
        return cls(orders=read_list(payload, "orders", object_item(Order.from_dict, "orders")))

    def to_dict(self) -> Dict[str, Any]:
        return {"orders": [order.to_dict() for order in self.orders]}


@dataclass
class TokenAmount:
    amount: float = 0.0
    mint: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TokenAmount":
        return cls(amount=read_float(payload, "amount"), mint=read_str(payload, "mint"))

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "mint": self.mint}


@dataclass
class UnsettledRow:
    open_orders_account: str = ""
    base_settleable: Optional[TokenAmount] = None
    quote_settleable: Optional[TokenAmount] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UnsettledRow":
        return cls(
            open_orders_account=read_str(payload, "openOrdersAccount"),
            base_settleable=read_object(payload, "baseSettleable", TokenAmount.from_dict),
            quote_settleable=read_object(payload, "quoteSettleable", TokenAmount.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "openOrdersAccount": self.open_orders_account,
            "baseSettleable": dump_optional(self.base_settleable),
            "quoteSettleable": dump_optional(self.quote_settleable),
        }


@dataclass
class GetUnsettledResponse:
    market: str = ""
    unsettled: List[UnsettledRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetUnsettledResponse":
        return cls(
            market=read_str(payload, "market"),
            unsettled=read_list(payload, "unsettled", object_item(UnsettledRow.from_dict, "unsettled")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"market": self.market, "unsettled": [row.to_dict() for row in self.unsettled]}


@dataclass
class TokenBalance:
    symbol: str = ""
    token_mint: str = ""
    settled_amount: float = 0.0
    unsettled_amount: float = 0.0
    open_orders_amount: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TokenBalance":
        return cls(
            symbol=read_str(payload, "symbol"),
            token_mint=read_str(payload, "tokenMint"),
            settled_amount=read_float(payload, "settledAmount"),
            unsettled_amount=read_float(payload, "unsettledAmount"),
            open_orders_amount=read_float(payload, "openOrdersAmount"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "tokenMint": self.token_mint,
            "settledAmount": self.settled_amount,
            "unsettledAmount": self.unsettled_amount,
            "openOrdersAmount": self.open_orders_amount,
        }


@dataclass
class GetAccountBalanceResponse:
    """Every token held by an owner, including amounts locked in open orders"""

    tokens: List[TokenBalance] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetAccountBalanceResponse":
        return cls(tokens=read_list(payload, "tokens", object_item(TokenBalance.from_dict, "tokens")))

    def to_dict(self) -> Dict[str, Any]:
        return {"tokens": [token.to_dict() for token in self.tokens]}


@dataclass
class OrderStatusInfo:
    market: str = ""
    open_order_address: str = ""
    order_id: str = ""
    client_order_id: int = 0
    order_status: OrderStatus = OrderStatus.OS_UNKNOWN
    quantity_released: float = 0.0
    quantity_remaining: float = 0.0
    side: Side = Side.S_UNKNOWN
    fill_price: float = 0.0
    order_price: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OrderStatusInfo":
        return cls(
            market=read_str(payload, "market"),
            open_order_address=read_str(payload, "openOrderAddress"),
            order_id=read_str(payload, "orderID"),
            client_order_id=read_int(payload, "clientOrderID"),
            order_status=read_enum(payload, "orderStatus", OrderStatus),
            quantity_released=read_float(payload, "quantityReleased"),
            quantity_remaining=read_float(payload, "quantityRemaining"),
            side=read_enum(payload, "side", Side),
            fill_price=read_float(payload, "fillPrice"),
            order_price=read_float(payload, "orderPrice"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "openOrderAddress": self.open_order_address,
            "orderID": self.order_id,
            "clientOrderID": str(self.client_order_id),
            "orderStatus": self.order_status.name,
            "quantityReleased": self.quantity_released,
            "quantityRemaining": self.quantity_remaining,
            "side": self.side.name,
            "fillPrice": self.fill_price,
            "orderPrice": self.order_price,
        }


@dataclass
class GetOrderStatusStreamResponse:
    slot: int = 0
    order_info: Optional[OrderStatusInfo] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GetOrderStatusStreamResponse":
        return cls(
            slot=read_int(payload, "slot"),
            order_info=read_object(payload, "orderInfo", OrderStatusInfo.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"slot": str(self.slot), "orderInfo": dump_optional(self.order_info)}


__all__ = [
    "GetAccountBalanceResponse",
    "GetOpenOrdersResponse",
    "GetOrderStatusStreamResponse",
    "GetUnsettledResponse",
    "Order",
    "OrderStatusInfo",
    "TokenAmount",
    "TokenBalance",
    "UnsettledRow",
]
