from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal, DecimalException
from typing import Callable, Optional

from ..domain.amounts import from_base_units, parse_decimal, to_base_units, to_positive_base_units
from ..domain.config import PAYMENT_TOKEN, PRICE_DECIMALS
from ..domain.entities import BalancesSnapshot, Price, Session, StatusEvent, TokenDescriptor, UNSET_PRICE
from ..domain.errors import Busy, InvalidAmount
from ..domain.ports import UseCaseError
from ..usecases.approve_token import ApproveToken
from ..usecases.check_system_status import CheckSystemStatus
from ..usecases.error_mapping import map_ledger_error
from ..usecases.refresh_price import RefreshPrice
from ..usecases.trade_flow_coordinator import FlowResult, TradeFlowCoordinator
from .status_channel import StatusChannel

log = logging.getLogger(__name__)

_ESTIMATE_QUANT = Decimal("0.01")
ZERO_ESTIMATE = "0.00"


def estimate_bonds(usdt_amount: str, price: Price, price_decimals: int = PRICE_DECIMALS) -> str:
    """Bonds bought for ``usdt_amount`` at ``price``, truncated to cents."""
    return _estimate(usdt_amount, price, price_decimals, lambda amount, usd: amount / usd)


def estimate_usdt(bond_amount: str, price: Price, price_decimals: int = PRICE_DECIMALS) -> str:
    """USDt paid out for ``bond_amount`` at ``price``, truncated to cents."""
    return _estimate(bond_amount, price, price_decimals, lambda amount, usd: amount * usd)


def _estimate(
    text: str, price: Price, price_decimals: int, op: Callable[[Decimal, Decimal], Decimal]
) -> str:
    if not text or not price.is_available:
        return ZERO_ESTIMATE
    try:
        amount = parse_decimal(text)
    except InvalidAmount:
        return ZERO_ESTIMATE
    usd = Decimal(price.raw).scaleb(-price_decimals)
    try:
        return str(op(amount, usd).quantize(_ESTIMATE_QUANT, rounding=ROUND_DOWN))
    except DecimalException:
        # Result exceeds the decimal context precision.
        return ZERO_ESTIMATE


class TradeVM:
    """Subscribe/redeem form state and commands.

    Holds the entered amounts, the last balances snapshot and the single-flight
    ``busy`` flag. Only one trade command runs at a time; a second invocation
    while one is pending raises :class:`Busy`.
    """

    def __init__(
        self,
        *,
        coordinator: TradeFlowCoordinator,
        status: StatusChannel,
        session: Callable[[], Optional[Session]],
        uc_approve: ApproveToken,
        uc_refresh_price: RefreshPrice,
        uc_check_status: Optional[CheckSystemStatus] = None,
        display_precision: int = 4,
        price_decimals: int = PRICE_DECIMALS,
        on_changed: Optional[Callable[["TradeVM"], None]] = None,
    ) -> None:
        self.coordinator = coordinator
        self.status = status
        self.session = session
        self.uc_approve = uc_approve
        self.uc_refresh_price = uc_refresh_price
        self.uc_check_status = uc_check_status
        self.display_precision = display_precision
        self.price_decimals = price_decimals
        self.on_changed = on_changed

        self.subscribe_amount: str = ""
        self.redeem_amount: str = ""
        self.price: Price = UNSET_PRICE
        self.balances: Optional[BalancesSnapshot] = None
        self.busy: bool = False

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def estimated_bonds(self) -> str:
        return estimate_bonds(self.subscribe_amount, self.price, self.price_decimals)

    @property
    def estimated_usdt(self) -> str:
        return estimate_usdt(self.redeem_amount, self.price, self.price_decimals)

    @property
    def usdt_label(self) -> str:
        if self.balances is None:
            return "0"
        return from_base_units(
            self.balances.usdt_raw, self.balances.usdt_decimals, self.display_precision
        )

    @property
    def bond_label(self) -> str:
        if self.balances is None:
            return "0"
        return from_base_units(
            self.balances.bond_raw, self.balances.bond_decimals, self.display_precision
        )

    @property
    def price_label(self) -> str:
        if not self.price.is_available:
            return "Not set"
        return "$" + from_base_units(self.price.raw, self.price_decimals, 2, min_fraction_digits=2)

    def apply_balances(self, snapshot: BalancesSnapshot) -> None:
        self.balances = snapshot
        self.price = snapshot.price
        self._changed()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def cmd_subscribe(self) -> FlowResult:
        with self._single_flight():
            result = self.coordinator.subscribe(self.session(), self.subscribe_amount)
        self._after_flow(result, clear="subscribe")
        return result

    def cmd_redeem(self) -> FlowResult:
        with self._single_flight():
            result = self.coordinator.redeem(self.session(), self.redeem_amount)
        self._after_flow(result, clear="redeem")
        return result

    def cmd_approve(self, token: TokenDescriptor) -> bool:
        """Approve the amount entered for ``token``'s side of the form."""
        amount = self.subscribe_amount if token.contract == PAYMENT_TOKEN.contract else self.redeem_amount
        label = token.symbol.upper()
        with self._single_flight():
            session = self.session()
            if session is None:
                self.status.error("Please connect wallet first.")
                return False
            try:
                to_positive_base_units(amount, token.decimals)
                self.status.loading(f"Approving {label}...")
                receipt = self.uc_approve(token, amount, session.signer)
            except UseCaseError as exc:
                self.status.error(exc.message)
                return False
        self.status.success(f"{label} approved!", receipt.tx_hash)
        return True

    def cmd_update_price(self) -> Price:
        """Manual price refresh; returns the last observed price."""
        with self._single_flight():
            session = self.session()
            if session is None:
                self.status.error("Please connect wallet first.")
                return self.price
            self.status.loading("Requesting price update...")
            try:
                price = self.uc_refresh_price(
                    session.signer, self.coordinator.settings.price_max_wait_ms
                )
            except Exception as exc:
                mapped = map_ledger_error(
                    exc, default_code="PRICE_UPDATE_FAILED", default_message="Failed to update price."
                )
                self.status.error(mapped.message)
                return self.price
        self.price = price
        self.status.publish(StatusEvent("success", "Price updated!"))
        self._changed()
        return price

    def cmd_check_status(self) -> Optional[str]:
        if self.uc_check_status is None:
            return None
        session = self.session()
        if session is None:
            self.status.error("Please connect wallet first.")
            return None
        self.status.loading("Checking system status...")
        preview_raw: Optional[int] = None
        try:
            preview_raw = to_base_units(self.subscribe_amount, PAYMENT_TOKEN.decimals) or None
        except InvalidAmount:
            preview_raw = None
        try:
            report = self.uc_check_status(session.account, preview_raw)
        except Exception as exc:
            mapped = map_ledger_error(exc, default_code="STATUS_CHECK_FAILED")
            self.status.error(f"Failed to check system status: {mapped.message}")
            return None
        text = report.render()
        self.status.info(text)
        return text

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _single_flight(self) -> "_BusyGuard":
        if self.busy:
            raise Busy()
        return _BusyGuard(self)

    def _after_flow(self, result: FlowResult, *, clear: str) -> None:
        if result.price is not None:
            self.price = result.price
        if result.ok:
            if clear == "subscribe":
                self.subscribe_amount = ""
            else:
                self.redeem_amount = ""
        self._changed()

    def _changed(self) -> None:
        if self.on_changed:
            self.on_changed(self)


class _BusyGuard:
    def __init__(self, vm: TradeVM) -> None:
        self.vm = vm

    def __enter__(self) -> TradeVM:
        self.vm.busy = True
        self.vm._changed()
        return self.vm

    def __exit__(self, *exc_info: object) -> None:
        self.vm.busy = False
        self.vm._changed()


__all__ = ["TradeVM", "ZERO_ESTIMATE", "estimate_bonds", "estimate_usdt"]
