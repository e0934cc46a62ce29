
"""Domain package exports for value objects and pure helpers."""

from .amounts import from_base_units, to_base_units, to_positive_base_units
from .countdown import Countdown, describe_remaining
from .entities import (
    Allowance,
    Balance,
    BalancesSnapshot,
    CouponState,
    HolderStatus,
    Price,
    Session,
    StatusEvent,
    SubscriptionPreview,
    TokenDescriptor,
    TxReceipt,
)

__all__ = [
    "Allowance",
    "Balance",
    "BalancesSnapshot",
    "Countdown",
    "CouponState",
    "HolderStatus",
    "Price",
    "Session",
    "StatusEvent",
    "SubscriptionPreview",
    "TokenDescriptor",
    "TxReceipt",
    "describe_remaining",
    "from_base_units",
    "to_base_units",
    "to_positive_base_units",
]
