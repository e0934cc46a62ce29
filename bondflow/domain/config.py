from __future__ import annotations

"""Static network and contract configuration for the bond front-end."""

from dataclasses import dataclass, field
from typing import Dict

from bondflow.domain.entities import Address, ContractName, TokenDescriptor

SEPOLIA_CHAIN_ID = 11155111
SEPOLIA_EXPLORER_URL = "https://sepolia.etherscan.io"

USDT = "usdt"
BOND_TOKEN = "bond_token"
PRICE_ORACLE = "price_oracle"
SUBSCRIPTION = "subscription"
COUPON_PAYMENT = "coupon_payment"

CONTRACT_NAMES: tuple[ContractName, ...] = (
    PRICE_ORACLE,
    BOND_TOKEN,
    USDT,
    SUBSCRIPTION,
    COUPON_PAYMENT,
)

DEFAULT_CONTRACT_ADDRESSES: Dict[ContractName, Address] = {
    PRICE_ORACLE: "0x8F46cD4bd16cF2b375ea8149e79baf172fC787BF",
    BOND_TOKEN: "0x890BE391d1fB165306788E46C52176451A8D82eB",
    USDT: "0xD140196414b96d159a663323d20DC334208cec25",
    SUBSCRIPTION: "0xA16d0Bf35215082b25b5893a3689D16ED8a07295",
    COUPON_PAYMENT: "0x0773Ac07B137D9608cf01A0Db5cb83BDc5b95e9B",
}

# USDt is quoted in cents and the bond token is indivisible.
PAYMENT_TOKEN = TokenDescriptor(symbol="USDt", contract=USDT, decimals=2)
BOND = TokenDescriptor(symbol="AAPL50", contract=BOND_TOKEN, decimals=0)

# Default scale of oracle prices (integer cents).
PRICE_DECIMALS = 2


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    rpc_url: str = "http://127.0.0.1:8545"
    chain_id: int = SEPOLIA_CHAIN_ID
    explorer_url: str = SEPOLIA_EXPLORER_URL
    contracts: Dict[ContractName, Address] = field(
        default_factory=lambda: dict(DEFAULT_CONTRACT_ADDRESSES)
    )
    request_timeout_s: int = 30
    price_max_wait_ms: int = 10000
    price_poll_interval_ms: int = 1000
    coupon_refresh_ms: int = 30000
    countdown_refresh_ms: int = 60000
    balance_display_precision: int = 4
    price_decimals: int = PRICE_DECIMALS
    """Decimals of the oracle's getLatestPriceUSD answer."""


__all__ = [
    "BOND",
    "BOND_TOKEN",
    "CONTRACT_NAMES",
    "COUPON_PAYMENT",
    "DEFAULT_CONTRACT_ADDRESSES",
    "PAYMENT_TOKEN",
    "PRICE_DECIMALS",
    "PRICE_ORACLE",
    "SEPOLIA_CHAIN_ID",
    "SEPOLIA_EXPLORER_URL",
    "SUBSCRIPTION",
    "SettingsConfig",
    "USDT",
]
