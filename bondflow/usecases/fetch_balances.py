from __future__ import annotations

import logging
from dataclasses import dataclass

from bondflow.domain.config import BOND, PAYMENT_TOKEN, PRICE_ORACLE
from bondflow.domain.entities import Address, BalancesSnapshot, Price, TokenDescriptor
from bondflow.domain.ports import LedgerPort

log = logging.getLogger(__name__)


@dataclass
class FetchBalances:
    """Read both token balances with their on-chain decimals and the price.

    Errors propagate as ``RemoteReadError``; background callers treat them as
    non-fatal.
    """

    ledger: LedgerPort
    payment_token: TokenDescriptor = PAYMENT_TOKEN
    bond_token: TokenDescriptor = BOND

    def __call__(self, account: Address) -> BalancesSnapshot:
        usdt_raw, usdt_decimals = self._token(self.payment_token, account)
        bond_raw, bond_decimals = self._token(self.bond_token, account)
        price = Price.from_reading(self.ledger.read(PRICE_ORACLE, "getLatestPriceUSD", ()))
        log.debug(
            "Balances for %s: %d %s, %d %s, price %d",
            account,
            usdt_raw,
            self.payment_token.symbol,
            bond_raw,
            self.bond_token.symbol,
            price.raw,
        )
        return BalancesSnapshot(
            usdt_raw=usdt_raw,
            usdt_decimals=usdt_decimals,
            bond_raw=bond_raw,
            bond_decimals=bond_decimals,
            price=price,
        )

    def _token(self, token: TokenDescriptor, account: Address) -> tuple[int, int]:
        raw = int(self.ledger.read(token.contract, "balanceOf", (account,)))
        decimals = int(self.ledger.read(token.contract, "decimals", ()))
        return raw, decimals
