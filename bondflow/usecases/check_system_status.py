"""Diagnostic snapshot of the subscription system for the connected account."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from bondflow.domain.config import BOND, PAYMENT_TOKEN, PRICE_ORACLE, SUBSCRIPTION
from bondflow.domain.entities import Address, Price, SubscriptionPreview, TokenDescriptor
from bondflow.domain.errors import LedgerError
from bondflow.domain.ports import LedgerPort
from bondflow.usecases.preview_subscription import PreviewSubscription

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolderFunds:
    """Balances and subscription-contract allowances of one address."""

    usdt_raw: int
    bond_raw: int
    usdt_allowance_raw: int
    bond_allowance_raw: int


@dataclass
class SystemStatusReport:
    price: Price
    user: HolderFunds
    issuer: Optional[Address] = None
    issuer_funds: Optional[HolderFunds] = None
    issuer_note: Optional[str] = None
    """Set when the issuer could not be inspected."""
    issues: List[str] = field(default_factory=list)
    preview: Optional[SubscriptionPreview] = None

    def render(self) -> str:
        """Multi-line text report for an ``info`` status message."""
        lines = [
            "SYSTEM STATUS:",
            f"Price: {self.price.raw / 100:g} USD",
            f"Your USDt: {self.user.usdt_raw}",
            f"Your AAPL50: {self.user.bond_raw}",
            f"USDt Allowance: {self.user.usdt_allowance_raw}",
            f"AAPL50 Allowance: {self.user.bond_allowance_raw}",
        ]
        if self.issuer_funds is not None:
            lines += [
                "",
                "ISSUER STATUS:",
                f"Issuer Address: {self.issuer}",
                f"Issuer USDt: {self.issuer_funds.usdt_raw}",
                f"Issuer AAPL50: {self.issuer_funds.bond_raw}",
                f"Issuer USDt Allowance: {self.issuer_funds.usdt_allowance_raw}",
                f"Issuer AAPL50 Allowance: {self.issuer_funds.bond_allowance_raw}",
            ]
        if self.issuer_note:
            lines += ["", self.issuer_note]
        if self.issues:
            lines += ["", "ISSUES FOUND:", *self.issues]
        if self.preview is not None:
            lines += [
                "",
                "SUBSCRIPTION PREVIEW:",
                f"Shares to receive: {self.preview.shares_to_receive}",
                f"Actual USDt needed: {self.preview.actual_usdt_needed}",
                f"Price: {self.preview.price_cents} cents",
            ]
        return "\n".join(lines)


@dataclass
class CheckSystemStatus:
    """Collect price, user and issuer state and list anything blocking trades.

    Only the price and user reads are mandatory. Issuer lookups and the
    optional preview degrade to a note instead of failing the report.
    """

    ledger: LedgerPort
    payment_token: TokenDescriptor = PAYMENT_TOKEN
    bond_token: TokenDescriptor = BOND

    def __call__(self, account: Address, preview_usdt_raw: Optional[int] = None) -> SystemStatusReport:
        price = Price.from_reading(self.ledger.read(PRICE_ORACLE, "getLatestPriceUSD", ()))
        report = SystemStatusReport(price=price, user=self._funds(account))

        try:
            report.issuer = self.ledger.read(SUBSCRIPTION, "issuer", ())
        except LedgerError as exc:
            log.info("Could not get issuer address: %s", exc.message)

        if report.issuer:
            try:
                report.issuer_funds = self._funds(report.issuer)
            except LedgerError as exc:
                log.warning("Issuer status check failed: %s", exc.message)
                report.issuer_note = f"Could not check issuer status: {exc.message}"

        report.issues = self._issues(report)

        if preview_usdt_raw:
            try:
                report.preview = PreviewSubscription(self.ledger)(preview_usdt_raw)
            except LedgerError as exc:
                log.info("Preview not available: %s", exc.message)
        return report

    def _funds(self, owner: Address) -> HolderFunds:
        spender = self.ledger.address_of(SUBSCRIPTION)
        pay, bond = self.payment_token.contract, self.bond_token.contract
        return HolderFunds(
            usdt_raw=int(self.ledger.read(pay, "balanceOf", (owner,))),
            bond_raw=int(self.ledger.read(bond, "balanceOf", (owner,))),
            usdt_allowance_raw=int(self.ledger.read(pay, "allowance", (owner, spender))),
            bond_allowance_raw=int(self.ledger.read(bond, "allowance", (owner, spender))),
        )

    def _issues(self, report: SystemStatusReport) -> List[str]:
        issues: List[str] = []
        funds = report.issuer_funds
        symbol = self.bond_token.symbol
        if funds is not None:
            if funds.bond_raw == 0:
                issues.append(f"Issuer has no {symbol} tokens")
            if funds.bond_allowance_raw == 0:
                issues.append(f"Issuer has not approved {symbol}")
        if not report.price.is_available:
            issues.append("Price is 0 or negative")
        return issues


__all__ = ["CheckSystemStatus", "HolderFunds", "SystemStatusReport"]
