"""Write-path models: order options, unsigned transaction responses, submit result, error result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from ._fields import read_int, read_str, read_str_list


@dataclass(frozen=True)
class PostOrderOpts:
    """Optional order placement settings.

    ``client_order_id`` of 0 means "unset"; ``skip_pre_flight`` only affects
    the submit step of ``submit_order``.
    """

    open_orders_address: str = ""
    client_order_id: int = 0
    skip_pre_flight: bool = False

    def __post_init__(self) -> None:
        if self.client_order_id < 0:
            raise ValueError("client_order_id must be non-negative")


@dataclass
class PostOrderResponse:
    """Unsigned order placement transaction (base64)"""

    transaction: str = ""
    open_orders_address: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PostOrderResponse":
        return cls(
            transaction=read_str(payload, "transaction"),
            open_orders_address=read_str(payload, "openOrdersAddress"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"transaction": self.transaction, "openOrdersAddress": self.open_orders_address}


@dataclass
class PostCancelOrderResponse:
    transaction: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PostCancelOrderResponse":
        return cls(transaction=read_str(payload, "transaction"))

    def to_dict(self) -> Dict[str, Any]:
        return {"transaction": self.transaction}


@dataclass
class PostCancelAllResponse:
    """One unsigned cancel transaction per batch, in the order they must be submitted"""

    transactions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PostCancelAllResponse":
        return cls(transactions=read_str_list(payload, "transactions"))

    def to_dict(self) -> Dict[str, Any]:
        return {"transactions": list(self.transactions)}


@dataclass
class PostSettleResponse:
    transaction: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PostSettleResponse":
        return cls(transaction=read_str(payload, "transaction"))

    def to_dict(self) -> Dict[str, Any]:
        return {"transaction": self.transaction}


@dataclass
class PostSubmitResponse:
    """Ledger signature of a submitted transaction"""

    signature: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PostSubmitResponse":
        return cls(signature=read_str(payload, "signature"))

    def to_dict(self) -> Dict[str, Any]:
        return {"signature": self.signature}


@dataclass
class ErrorResult:
    """Structured error body returned by the service"""

    code: int = 0
    message: str = ""
    details: Any = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ErrorResult":
        details = payload.get("details")
        if details is None:
            details = payload.get("data")
        return cls(code=read_int(payload, "code"), message=read_str(payload, "message"), details=details)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


__all__ = [
    "ErrorResult",
    "PostCancelAllResponse",
    "PostCancelOrderResponse",
    "PostOrderOpts",
    "PostOrderResponse",
    "PostSettleResponse",
    "PostSubmitResponse",
]
