"""Contract ABI tables consumed by the web3 ledger adapter.

These are static interface descriptions of the deployed contracts; they are
kept as Python literals so the adapter does not need package data files.
"""

from __future__ import annotations

from typing import Any, Dict, List

from bondflow.domain.config import (
    BOND_TOKEN,
    COUPON_PAYMENT,
    PRICE_ORACLE,
    SUBSCRIPTION,
    USDT,
)

Abi = List[Dict[str, Any]]


def _fn(
    name: str,
    inputs: List[tuple[str, str]],
    outputs: List[tuple[str, str]],
    mutability: str,
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t, "internalType": t} for n, t in outputs],
        "stateMutability": mutability,
    }


ERC20_ABI: Abi = [
    _fn("balanceOf", [("_owner", "address")], [("balance", "uint256")], "view"),
    _fn(
        "approve",
        [("_spender", "address"), ("_value", "uint256")],
        [("success", "bool")],
        "nonpayable",
    ),
    _fn("decimals", [], [("", "uint8")], "view"),
    _fn(
        "allowance",
        [("_owner", "address"), ("_spender", "address")],
        [("remaining", "uint256")],
        "view",
    ),
]

PRICE_ORACLE_ABI: Abi = [
    _fn("getLatestPriceUSD", [], [("", "uint256")], "view"),
    _fn("requestPriceUpdate", [], [("requestId", "bytes32")], "nonpayable"),
    _fn(
        "updatePriceManual",
        [
            ("_newPriceUSD", "uint256"),
            ("_riskFreeRateBps", "uint256"),
            ("_creditSpreadBps", "uint256"),
        ],
        [],
        "nonpayable",
    ),
]

SUBSCRIPTION_ABI: Abi = [
    _fn("subscribe", [("usdtAmountCents", "uint256")], [], "nonpayable"),
    _fn("redeem", [("bondtToRedeem", "uint256")], [], "nonpayable"),
    _fn("issuer", [], [("", "address")], "view"),
    _fn(
        "getUserBalances",
        [("user", "address")],
        [("usdtBalance", "uint256"), ("bondtBalance", "uint256")],
        "view",
    ),
    _fn(
        "previewSubscription",
        [("usdtAmountCents", "uint256")],
        [
            ("bondtToReceive", "uint256"),
            ("actualUsdtNeeded", "uint256"),
            ("tokenPriceCents", "uint256"),
        ],
        "view",
    ),
]

COUPON_PAYMENT_ABI: Abi = [
    _fn("initializeClaim", [("user", "address")], [], "nonpayable"),
    _fn("canClaim", [("user", "address")], [("", "bool")], "view"),
    _fn("calculateCoupon", [("user", "address")], [("", "uint256")], "view"),
    _fn("claimCoupon", [], [], "nonpayable"),
    _fn("getNextClaimTime", [("user", "address")], [("", "uint256")], "view"),
]

CONTRACT_ABIS: Dict[str, Abi] = {
    USDT: ERC20_ABI,
    BOND_TOKEN: ERC20_ABI,
    PRICE_ORACLE: PRICE_ORACLE_ABI,
    SUBSCRIPTION: SUBSCRIPTION_ABI,
    COUPON_PAYMENT: COUPON_PAYMENT_ABI,
}


__all__ = [
    "Abi",
    "CONTRACT_ABIS",
    "COUPON_PAYMENT_ABI",
    "ERC20_ABI",
    "PRICE_ORACLE_ABI",
    "SUBSCRIPTION_ABI",
]
