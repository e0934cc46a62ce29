from __future__ import annotations

"""Domain value objects shared across adapters, use-cases, and view models."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

Address = str
ContractName = str
StatusKind = Literal["loading", "success", "error", "info"]

STATUS_KINDS: tuple[str, ...] = ("loading", "success", "error", "info")


def _require_raw(owner: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{owner}.raw must be an integer quantity.")
    if value < 0:
        raise ValueError(f"{owner}.raw must not be negative.")


@dataclass(frozen=True)
class Session:
    """Active wallet identity for one connected account."""

    account: Address
    """Checksummed or lowercase hex address of the connected account."""
    chain_id: int
    """Network identifier reported by the wallet provider."""
    signer: Optional[Address] = None
    """Address the wallet provider signs with; defaults to ``account``."""

    def __post_init__(self) -> None:
        if not isinstance(self.account, str) or not self.account.strip():
            raise ValueError("Session requires a non-empty account.")
        if isinstance(self.chain_id, bool) or not isinstance(self.chain_id, int):
            raise TypeError("Session.chain_id must be an integer.")
        if self.signer is None:
            object.__setattr__(self, "signer", self.account)


@dataclass(frozen=True)
class TokenDescriptor:
    """Static token description sourced from configuration."""

    symbol: str
    """Display symbol, e.g. ``USDt``."""
    contract: ContractName
    """Logical contract name resolved by the ledger adapter."""
    decimals: int
    """Decimal precision of the token's base unit."""

    def __post_init__(self) -> None:
        if not isinstance(self.decimals, int) or self.decimals < 0:
            raise ValueError("TokenDescriptor.decimals must be a non-negative integer.")


@dataclass(frozen=True)
class Balance:
    """Raw token balance read from the ledger."""

    token: ContractName
    owner: Address
    raw: int

    def __post_init__(self) -> None:
        _require_raw("Balance", self.raw)


@dataclass(frozen=True)
class Allowance:
    """Raw spending cap granted by ``owner`` to ``spender``."""

    token: ContractName
    owner: Address
    spender: Address
    raw: int

    def __post_init__(self) -> None:
        _require_raw("Allowance", self.raw)


@dataclass(frozen=True)
class Price:
    """Oracle price in integer cents.

    A zero reading means the oracle has not published a price yet; the
    ``initialized`` flag records that separately from the numeric value.
    """

    raw: int
    initialized: bool = True

    def __post_init__(self) -> None:
        _require_raw("Price", self.raw)

    @classmethod
    def from_reading(cls, value: object) -> "Price":
        """Build a price from an oracle read; zero or empty means not yet set."""
        # Negative oracle answers are treated like an unpublished price.
        raw = max(0, int(value or 0))
        return cls(raw=raw, initialized=raw > 0)

    @property
    def is_available(self) -> bool:
        return self.initialized and self.raw > 0


UNSET_PRICE = Price(raw=0, initialized=False)


@dataclass(frozen=True)
class CouponState:
    """Read-through snapshot of the external coupon contract for one holder."""

    next_claim_ts: int = 0
    """UNIX timestamp of the next claim window; ``0`` when not initialized."""
    claimable_raw: int = 0
    """Coupon amount in payment-token base units."""
    can_claim: bool = False
    initialized: bool = False


class HolderStatus(Enum):
    """Holder classification computed once per subscription."""

    FIRST_TIME = "first_time"
    RETURNING = "returning"

    @classmethod
    def from_balance(cls, raw_balance: int) -> "HolderStatus":
        return cls.FIRST_TIME if int(raw_balance) == 0 else cls.RETURNING


@dataclass(frozen=True)
class TxReceipt:
    """Reference to a transaction accepted by the ledger."""

    tx_hash: str

    def __post_init__(self) -> None:
        if not isinstance(self.tx_hash, str) or not self.tx_hash.strip():
            raise ValueError("TxReceipt requires a non-empty transaction hash.")

    def __str__(self) -> str:
        return self.tx_hash


@dataclass(frozen=True)
class StatusEvent:
    """Structured status message for the presentation layer."""

    kind: StatusKind
    message: str
    tx_hash: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in STATUS_KINDS:
            raise ValueError(f"Unknown status kind '{self.kind}'.")

    def explorer_url(self, base_url: str) -> Optional[str]:
        """Return the block-explorer link for the attached transaction."""
        if not self.tx_hash:
            return None
        return f"{base_url.rstrip('/')}/tx/{self.tx_hash}"


@dataclass(frozen=True)
class BalancesSnapshot:
    """Payment and bond token balances plus the oracle price."""

    usdt_raw: int
    usdt_decimals: int
    bond_raw: int
    bond_decimals: int
    price: Price


@dataclass(frozen=True)
class SubscriptionPreview:
    """Result of ``previewSubscription`` for a payment amount."""

    shares_to_receive: int
    actual_usdt_needed: int
    price_cents: int


__all__ = [
    "Address",
    "Allowance",
    "Balance",
    "BalancesSnapshot",
    "ContractName",
    "CouponState",
    "HolderStatus",
    "Price",
    "STATUS_KINDS",
    "Session",
    "StatusEvent",
    "StatusKind",
    "SubscriptionPreview",
    "TokenDescriptor",
    "TxReceipt",
    "UNSET_PRICE",
]
