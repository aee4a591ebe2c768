"""Enumerations shared by requests and responses.

Values are the proto enum numbers; names are what travels in JSON.
"""

from enum import Enum


class Side(Enum):
    """Order side"""

    S_UNKNOWN = 0
    S_BID = 1
    S_ASK = 2


class OrderType(Enum):
    """Order execution type"""

    OT_LIMIT = 0
    OT_IOC = 1
    OT_POST = 2


class OrderStatus(Enum):
    """Order lifecycle status reported by the order status stream"""

    OS_UNKNOWN = 0
    OS_OPEN = 1
    OS_PARTIAL_FILL = 2
    OS_FILLED = 3
    OS_CANCELLED = 4


__all__ = ["OrderStatus", "OrderType", "Side"]
