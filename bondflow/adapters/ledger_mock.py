from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from bondflow.domain.config import (
    BOND_TOKEN,
    COUPON_PAYMENT,
    DEFAULT_CONTRACT_ADDRESSES,
    PRICE_ORACLE,
    SUBSCRIPTION,
    USDT,
)
from bondflow.domain.entities import Address, ContractName, TxReceipt
from bondflow.domain.errors import RemoteReadError, RemoteSendError

DEFAULT_ISSUER = "0x" + "15" * 20
COUPON_PERIOD_S = 182 * 86400

_TOKENS = (USDT, BOND_TOKEN)


@dataclass
class LedgerMock:
    """Offline substitute for ``Web3LedgerAdapter`` with deterministic contracts.

    Token transfers, the oracle, subscription and coupon contracts are modelled
    in memory. Price updates can be delayed by a number of oracle reads, and any
    contract method can be made to fail with ``fail_on``.
    """

    contracts: Dict[ContractName, Address] = field(
        default_factory=lambda: dict(DEFAULT_CONTRACT_ADDRESSES)
    )
    issuer: Address = DEFAULT_ISSUER
    price_cents: int = 0
    pending_price_cents: Optional[int] = None
    price_update_delay_reads: int = 0
    coupon_per_token_cents: int = 120
    coupon_period_s: int = COUPON_PERIOD_S
    clock: Callable[[], float] = time.time

    def __post_init__(self) -> None:
        self._balances: Dict[Tuple[ContractName, str], int] = {}
        self._allowances: Dict[Tuple[ContractName, str, str], int] = {}
        self._decimals: Dict[ContractName, int] = {USDT: 2, BOND_TOKEN: 0}
        self._next_claim: Dict[str, int] = {}
        self._failures: Dict[Tuple[ContractName, str], str] = {}
        self._price_requested = False
        self._reads_since_request = 0
        self._nonce = 0
        self.calls: List[Tuple[str, ContractName, str, tuple]] = []

    # ---------- LedgerPort ----------

    def address_of(self, contract: ContractName) -> Address:
        try:
            return self.contracts[contract]
        except KeyError:
            raise ValueError(f"Unknown contract '{contract}'.") from None

    def read(self, contract: ContractName, method: str, args: Sequence[Any] = ()) -> Any:
        args = tuple(args)
        self.calls.append(("read", contract, method, args))
        failure = self._failures.get((contract, method))
        if failure:
            raise RemoteReadError(failure, contract=contract, method=method)

        if contract in _TOKENS:
            if method == "balanceOf":
                return self.balance_of(contract, args[0])
            if method == "decimals":
                return self._decimals[contract]
            if method == "allowance":
                return self.allowance_of(contract, args[0], args[1])
        elif contract == PRICE_ORACLE and method == "getLatestPriceUSD":
            return self._read_price()
        elif contract == SUBSCRIPTION:
            if method == "issuer":
                return self.issuer
            if method == "getUserBalances":
                user = args[0]
                return (self.balance_of(USDT, user), self.balance_of(BOND_TOKEN, user))
            if method == "previewSubscription":
                return self._preview(int(args[0]))
        elif contract == COUPON_PAYMENT:
            user = _key(args[0]) if args else ""
            if method == "getNextClaimTime":
                return self._next_claim.get(user, 0)
            if method == "canClaim":
                return self._can_claim(user)
            if method == "calculateCoupon":
                return self.balance_of(BOND_TOKEN, user) * self.coupon_per_token_cents
        raise RemoteReadError(
            f"execution reverted: unknown method {method}", contract=contract, method=method
        )

    def send(
        self,
        contract: ContractName,
        method: str,
        args: Sequence[Any],
        signer: Address,
    ) -> TxReceipt:
        args = tuple(args)
        self.calls.append(("send", contract, method, args))
        failure = self._failures.get((contract, method))
        if failure:
            raise RemoteSendError(failure, contract=contract, method=method)

        def revert(reason: str) -> RemoteSendError:
            return RemoteSendError(
                f"execution reverted: {reason}", contract=contract, method=method
            )

        if contract in _TOKENS and method == "approve":
            spender, amount = args
            self.set_allowance(contract, signer, spender, int(amount))
        elif contract == PRICE_ORACLE and method == "requestPriceUpdate":
            self._price_requested = True
            self._reads_since_request = 0
        elif contract == SUBSCRIPTION and method == "subscribe":
            self._subscribe(signer, int(args[0]), revert)
        elif contract == SUBSCRIPTION and method == "redeem":
            self._redeem(signer, int(args[0]), revert)
        elif contract == COUPON_PAYMENT and method == "initializeClaim":
            user = _key(args[0])
            if self._next_claim.get(user):
                raise revert("already initialized")
            self._next_claim[user] = int(self.clock()) + self.coupon_period_s
        elif contract == COUPON_PAYMENT and method == "claimCoupon":
            user = _key(signer)
            if not self._can_claim(user):
                raise revert("coupon not claimable")
            amount = self.balance_of(BOND_TOKEN, user) * self.coupon_per_token_cents
            self._credit(USDT, user, amount)
            self._next_claim[user] += self.coupon_period_s
        else:
            raise revert(f"unknown method {method}")
        return self._receipt()

    # ---------- Test helpers ----------

    def set_balance(self, token: ContractName, owner: Address, raw: int) -> None:
        self._balances[(token, _key(owner))] = int(raw)

    def balance_of(self, token: ContractName, owner: Address) -> int:
        return self._balances.get((token, _key(owner)), 0)

    def set_allowance(
        self, token: ContractName, owner: Address, spender: Address, raw: int
    ) -> None:
        self._allowances[(token, _key(owner), _key(spender))] = int(raw)

    def allowance_of(self, token: ContractName, owner: Address, spender: Address) -> int:
        return self._allowances.get((token, _key(owner), _key(spender)), 0)

    def set_next_claim(self, owner: Address, timestamp: int) -> None:
        self._next_claim[_key(owner)] = int(timestamp)

    def fail_on(
        self, contract: ContractName, method: str, message: str = "execution reverted"
    ) -> None:
        self._failures[(contract, method)] = message

    def clear_failures(self) -> None:
        self._failures.clear()

    def methods_called(self, kind: Optional[str] = None) -> List[str]:
        """Return ``contract.method`` labels in call order, optionally filtered."""
        return [
            f"{contract}.{method}"
            for call_kind, contract, method, _ in self.calls
            if kind is None or call_kind == kind
        ]

    # ---------- Contract models ----------

    def _read_price(self) -> int:
        if self._price_requested and self.pending_price_cents is not None:
            if self._reads_since_request >= self.price_update_delay_reads:
                self.price_cents = self.pending_price_cents
                self.pending_price_cents = None
                self._price_requested = False
            else:
                self._reads_since_request += 1
        return self.price_cents

    def _preview(self, usdt_cents: int) -> Tuple[int, int, int]:
        price = self.price_cents
        if price <= 0:
            return (0, 0, 0)
        shares = usdt_cents // price
        return (shares, shares * price, price)

    def _subscribe(self, signer: Address, usdt_cents: int, revert) -> None:
        shares, cost, price = self._preview(usdt_cents)
        if price <= 0:
            raise revert("price not set")
        if shares <= 0:
            raise revert("amount below one bond")
        spender = self.address_of(SUBSCRIPTION)
        if self.balance_of(USDT, signer) < cost:
            raise revert("ERC20: transfer amount exceeds balance")
        if self.allowance_of(USDT, signer, spender) < cost:
            raise revert("ERC20: insufficient allowance")
        if self.balance_of(BOND_TOKEN, self.issuer) < shares:
            raise revert("issuer has insufficient bonds")
        self._spend_allowance(USDT, signer, spender, cost)
        self._transfer(USDT, signer, self.issuer, cost)
        self._transfer(BOND_TOKEN, self.issuer, signer, shares)

    def _redeem(self, signer: Address, shares: int, revert) -> None:
        price = self.price_cents
        if price <= 0:
            raise revert("price not set")
        spender = self.address_of(SUBSCRIPTION)
        payout = shares * price
        if self.balance_of(BOND_TOKEN, signer) < shares:
            raise revert("ERC20: transfer amount exceeds balance")
        if self.allowance_of(BOND_TOKEN, signer, spender) < shares:
            raise revert("ERC20: insufficient allowance")
        if self.balance_of(USDT, self.issuer) < payout:
            raise revert("issuer has insufficient USDt")
        self._spend_allowance(BOND_TOKEN, signer, spender, shares)
        self._transfer(BOND_TOKEN, signer, self.issuer, shares)
        self._transfer(USDT, self.issuer, signer, payout)

    def _can_claim(self, user: str) -> bool:
        next_ts = self._next_claim.get(_key(user), 0)
        return next_ts > 0 and int(self.clock()) >= next_ts

    def _transfer(self, token: ContractName, src: Address, dst: Address, amount: int) -> None:
        self._credit(token, src, -amount)
        self._credit(token, dst, amount)

    def _credit(self, token: ContractName, owner: Address, amount: int) -> None:
        key = (token, _key(owner))
        self._balances[key] = self._balances.get(key, 0) + amount

    def _spend_allowance(
        self, token: ContractName, owner: Address, spender: Address, amount: int
    ) -> None:
        key = (token, _key(owner), _key(spender))
        self._allowances[key] = self._allowances.get(key, 0) - amount

    def _receipt(self) -> TxReceipt:
        self._nonce += 1
        return TxReceipt(tx_hash=f"0x{self._nonce:064x}")


def _key(address: Any) -> str:
    return str(address or "").strip().lower()


__all__ = ["COUPON_PERIOD_S", "DEFAULT_ISSUER", "LedgerMock"]
