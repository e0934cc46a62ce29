from __future__ import annotations

"""Coordinator orchestrating subscribe and redeem flows without UI concerns."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from bondflow.domain.amounts import AmountInput, to_positive_base_units
from bondflow.domain.config import BOND, PAYMENT_TOKEN, SUBSCRIPTION, SettingsConfig
from bondflow.domain.entities import (
    HolderStatus,
    Price,
    Session,
    StatusEvent,
    TokenDescriptor,
    TxReceipt,
)
from bondflow.domain.errors import LedgerError, RemoteSendError
from bondflow.domain.ports import LedgerPort, UseCaseError
from bondflow.usecases.check_sufficiency import CheckSufficiency
from bondflow.usecases.classify_holder import ClassifyHolder
from bondflow.usecases.coupon_coordinator import CouponCoordinator, CouponOutcome, CouponResult
from bondflow.usecases.ensure_session import EnsureSession
from bondflow.usecases.error_mapping import (
    REDEEM_REVERT_HINT,
    SUBSCRIBE_REVERT_HINT,
    map_ledger_error,
)
from bondflow.usecases.refresh_price import RefreshPrice

log = logging.getLogger(__name__)

SUBSCRIBE = "subscribe"
REDEEM = "redeem"


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback used for hooks."""


class Severity(Enum):
    OK = "ok"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepOutcome:
    """Record of one flow step."""

    step: str
    """Step name, e.g. 'refresh_price' or 'send_subscribe'."""
    severity: Severity = Severity.OK
    message: str = ""
    tx_hash: Optional[str] = None


@dataclass
class FlowResult:
    """Everything observed while running one subscribe or redeem flow."""

    operation: str
    ok: bool = False
    tx_hash: Optional[str] = None
    amount_raw: Optional[int] = None
    price: Optional[Price] = None
    holder: Optional[HolderStatus] = None
    coupon: List[CouponResult] = field(default_factory=list)
    steps: List[StepOutcome] = field(default_factory=list)
    error: Optional[UseCaseError] = None

    def record(
        self,
        step: str,
        severity: Severity = Severity.OK,
        message: str = "",
        tx_hash: Optional[str] = None,
    ) -> StepOutcome:
        outcome = StepOutcome(step=step, severity=severity, message=message, tx_hash=tx_hash)
        self.steps.append(outcome)
        return outcome

    @property
    def recoverable_failures(self) -> List[StepOutcome]:
        return [s for s in self.steps if s.severity is Severity.RECOVERABLE]

    def step_names(self) -> List[str]:
        return [s.step for s in self.steps]


@dataclass
class FlowHooks:
    """Optional callbacks triggered on significant flow events."""

    on_step: Callable[[StepOutcome], None] = _noop
    on_completed: Callable[[FlowResult], None] = _noop
    on_error: Callable[[FlowResult], None] = _noop

    def __post_init__(self) -> None:
        self.on_step = self.on_step or _noop
        self.on_completed = self.on_completed or _noop
        self.on_error = self.on_error or _noop


class TradeFlowCoordinator:
    """Runs the multi-step subscribe and redeem flows.

    Steps run strictly in sequence; each result gates the next. Only the coupon
    steps of a subscription are recoverable, everything else ends the flow
    with exactly one ``error`` status. A successful flow ends with exactly one
    ``success`` status carrying the transaction hash.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        settings: SettingsConfig,
        publish: Optional[Callable[[StatusEvent], None]] = None,
        *,
        uc_refresh_price: Optional[RefreshPrice] = None,
        uc_check_sufficiency: Optional[CheckSufficiency] = None,
        uc_classify_holder: Optional[ClassifyHolder] = None,
        coupon: Optional[CouponCoordinator] = None,
        payment_token: TokenDescriptor = PAYMENT_TOKEN,
        bond_token: TokenDescriptor = BOND,
        hooks: Optional[FlowHooks] = None,
    ) -> None:
        self.ledger = ledger
        self.settings = settings
        self.publish = publish or _noop
        self.uc_refresh_price = uc_refresh_price or RefreshPrice(
            ledger, poll_interval_ms=settings.price_poll_interval_ms
        )
        self.uc_check_sufficiency = uc_check_sufficiency or CheckSufficiency(ledger)
        self.uc_classify_holder = uc_classify_holder or ClassifyHolder(ledger, bond_token)
        self.coupon = coupon or CouponCoordinator(ledger, self.publish)
        self.uc_ensure_session = EnsureSession(settings.chain_id)
        self.payment_token = payment_token
        self.bond_token = bond_token
        self.hooks = hooks or FlowHooks()

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def subscribe(self, session: Optional[Session], amount: AmountInput) -> FlowResult:
        """Buy bonds for ``amount`` USDt."""
        result = FlowResult(operation=SUBSCRIBE)
        try:
            raw = self._convert(result, amount, self.payment_token)
            session = self.uc_ensure_session(session)
            account, signer = session.account, session.signer

            self.publish(StatusEvent("loading", "1/4: Updating bond price..."))
            self._refresh_price(result, signer)

            holder = self.uc_classify_holder(account)
            result.holder = holder
            self._step(result, "classify_holder", message=holder.value)

            if holder is HolderStatus.RETURNING:
                self.publish(StatusEvent("loading", "2/4: Checking coupon..."))
                self._coupon_step(
                    result, "claim_coupon", self.coupon.evaluate_and_claim(account, holder, signer)
                )

            self.publish(StatusEvent("loading", "3/4: Processing subscription..."))
            self.uc_check_sufficiency(self.payment_token, account, raw)
            self._step(result, "check_sufficiency")

            receipt = self._send_trade("subscribe", raw, signer, SUBSCRIBE_REVERT_HINT)
            result.tx_hash = receipt.tx_hash
            self._step(result, "send_subscribe", tx_hash=receipt.tx_hash)
            log.info("Subscription submitted: %s", receipt.tx_hash)

            message = "Subscription successful!"
            if holder is HolderStatus.FIRST_TIME:
                self.publish(StatusEvent("loading", "4/4: Initializing coupon schedule..."))
                init = self.coupon.initialize_schedule(account, signer)
                self._coupon_step(result, "initialize_coupon", init)
                if init.outcome is CouponOutcome.SCHEDULE_INITIALIZED:
                    message = "Subscription successful! Coupon schedule set."
                else:
                    message = "Subscription successful! (Coupon init pending)"

            return self._succeed(result, message)
        except Exception as exc:
            return self._fail(result, exc, "Subscription failed.")

    def redeem(self, session: Optional[Session], amount: AmountInput) -> FlowResult:
        """Sell ``amount`` bonds back to the issuer."""
        result = FlowResult(operation=REDEEM)
        try:
            raw = self._convert(result, amount, self.bond_token)
            session = self.uc_ensure_session(session)
            account, signer = session.account, session.signer

            self.publish(StatusEvent("loading", "1/3: Updating price..."))
            self._refresh_price(result, signer)

            self.publish(StatusEvent("loading", "2/3: Processing redemption..."))
            self.uc_check_sufficiency(self.bond_token, account, raw)
            self._step(result, "check_sufficiency")

            receipt = self._send_trade("redeem", raw, signer, REDEEM_REVERT_HINT)
            result.tx_hash = receipt.tx_hash
            self._step(result, "send_redeem", tx_hash=receipt.tx_hash)
            log.info("Redemption submitted: %s", receipt.tx_hash)

            return self._succeed(result, "3/3: Redemption successful!")
        except Exception as exc:
            return self._fail(result, exc, "Redemption failed.")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _convert(self, result: FlowResult, amount: AmountInput, token: TokenDescriptor) -> int:
        raw = to_positive_base_units(amount, token.decimals)
        result.amount_raw = raw
        self._step(result, "convert_amount", message=f"{raw} {token.symbol} base units")
        return raw

    def _send_trade(self, method: str, raw: int, signer: str, revert_hint: str) -> TxReceipt:
        """Submit the value-moving call; only its reverts get the checklist."""
        try:
            return self.ledger.send(SUBSCRIPTION, method, (raw,), signer)
        except RemoteSendError as exc:
            raise map_ledger_error(
                exc, default_code=f"{method.upper()}_FAILED", revert_hint=revert_hint
            ) from exc

    def _refresh_price(self, result: FlowResult, signer: str) -> None:
        price = self.uc_refresh_price(signer, self.settings.price_max_wait_ms)
        result.price = price
        self._step(result, "refresh_price", message=str(price.raw))

    def _coupon_step(self, result: FlowResult, step: str, coupon: CouponResult) -> None:
        result.coupon.append(coupon)
        if coupon.recoverable_failure:
            message = coupon.failure.message if coupon.failure else coupon.outcome.value
            self._step(result, step, Severity.RECOVERABLE, message)
        else:
            self._step(result, step, message=coupon.outcome.value, tx_hash=coupon.tx_hash)

    def _step(
        self,
        result: FlowResult,
        step: str,
        severity: Severity = Severity.OK,
        message: str = "",
        tx_hash: Optional[str] = None,
    ) -> None:
        outcome = result.record(step, severity, message, tx_hash)
        self.hooks.on_step(outcome)

    def _succeed(self, result: FlowResult, message: str) -> FlowResult:
        result.ok = True
        self.publish(StatusEvent("success", message, result.tx_hash))
        self.hooks.on_completed(result)
        return result

    def _fail(
        self,
        result: FlowResult,
        exc: Exception,
        default_message: str,
    ) -> FlowResult:
        if isinstance(exc, (UseCaseError, LedgerError)):
            log.error("%s flow failed: %s", result.operation, exc)
        else:
            log.exception("%s flow failed unexpectedly", result.operation)
        mapped = map_ledger_error(
            exc,
            default_code=f"{result.operation.upper()}_FAILED",
            default_message=default_message,
        )
        result.ok = False
        result.error = mapped
        self._step(result, "failed", Severity.FATAL, mapped.message)
        self.publish(StatusEvent("error", mapped.message))
        self.hooks.on_error(result)
        return result


__all__ = [
    "FlowHooks",
    "FlowResult",
    "REDEEM",
    "SUBSCRIBE",
    "Severity",
    "StepOutcome",
    "TradeFlowCoordinator",
]
