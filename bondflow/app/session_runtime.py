"""Background refresh lifecycle bound to one wallet session.

Three channels run on the :class:`PollingScheduler`:

``balances``
    One-shot refresh on start, on account change and after each completed
    operation.
``coupon``
    Coupon status re-read every ``coupon_refresh_ms``.
``countdown``
    Countdown label recomputed every ``countdown_refresh_ms``.

Coupon channels restart whenever the account or the bond balance changes.
``stop`` cancels everything so no timer ever fires for a stale account.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..domain.config import SettingsConfig
from ..domain.entities import BalancesSnapshot, Session
from ..domain.errors import LedgerError
from ..domain.util import same_address
from ..usecases.fetch_balances import FetchBalances
from .polling_scheduler import PollingScheduler

log = logging.getLogger(__name__)

BALANCES = "balances"
COUPON = "coupon"
COUNTDOWN = "countdown"


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback."""


class SessionRuntime:
    def __init__(
        self,
        *,
        scheduler: PollingScheduler,
        uc_fetch_balances: FetchBalances,
        settings: SettingsConfig,
    ) -> None:
        self.scheduler = scheduler
        self.uc_fetch_balances = uc_fetch_balances
        self.settings = settings
        self.on_balances: Callable[[BalancesSnapshot], None] = _noop
        self.refresh_coupon: Callable[[], object] = _noop
        self.tick_countdown: Callable[[], object] = _noop

        self.session: Optional[Session] = None
        self.last_balances: Optional[BalancesSnapshot] = None
        self._generation = 0

    def bind(
        self,
        *,
        on_balances: Optional[Callable[[BalancesSnapshot], None]] = None,
        refresh_coupon: Optional[Callable[[], object]] = None,
        tick_countdown: Optional[Callable[[], object]] = None,
    ) -> None:
        """Attach the view-model callbacks driven by the timers."""
        self.on_balances = on_balances or _noop
        self.refresh_coupon = refresh_coupon or _noop
        self.tick_countdown = tick_countdown or _noop

    def current_session(self) -> Optional[Session]:
        return self.session

    @property
    def active(self) -> bool:
        return self.session is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, session: Session) -> None:
        """Bind ``session`` and (re)start every channel from scratch."""
        self.scheduler.cancel_all()
        self._generation += 1
        self.session = session
        self.last_balances = None
        log.info("Session started for %s on chain %d", session.account, session.chain_id)
        self.request_balances()
        self._restart_coupon_channels()

    def set_session(self, session: Optional[Session]) -> None:
        """Follow a wallet account or network change."""
        if session is None:
            self.stop()
            return
        current = self.session
        if (
            current is not None
            and same_address(current.account, session.account)
            and current.chain_id == session.chain_id
        ):
            self.session = session
            return
        self.start(session)

    def attach(self, session: Session) -> None:
        """Bind ``session`` without starting any channel, for one-shot commands."""
        self.scheduler.cancel_all()
        self._generation += 1
        self.session = session
        self.last_balances = None

    def stop(self) -> None:
        self._generation += 1
        self.scheduler.cancel_all()
        if self.session is not None:
            log.info("Session stopped for %s", self.session.account)
        self.session = None
        self.last_balances = None

    def __enter__(self) -> "SessionRuntime":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------
    def request_balances(self) -> None:
        if not self.active:
            return
        generation = self._generation
        self.scheduler.schedule(BALANCES, 1, lambda: self._run_balances(generation))

    def notify_operation_completed(self, *_: object) -> None:
        """Hook for completed subscribe/redeem flows."""
        self.request_balances()

    # ------------------------------------------------------------------
    # Channel bodies
    # ------------------------------------------------------------------
    def _run_balances(self, generation: int) -> None:
        if generation != self._generation or self.session is None:
            return
        try:
            snapshot = self.uc_fetch_balances(self.session.account)
        except LedgerError as exc:
            log.warning("Balance refresh failed: %s", exc.message)
            return
        if generation != self._generation:
            return
        previous = self.last_balances
        self.last_balances = snapshot
        self.on_balances(snapshot)
        if previous is not None and previous.bond_raw != snapshot.bond_raw:
            log.info("Bond balance changed %d -> %d", previous.bond_raw, snapshot.bond_raw)
            self._restart_coupon_channels()

    def _restart_coupon_channels(self) -> None:
        if not self.active:
            return
        generation = self._generation
        self.scheduler.cancel(COUPON)
        self.scheduler.cancel(COUNTDOWN)
        self.scheduler.schedule(COUPON, 1, lambda: self._run_coupon(generation))
        self.scheduler.schedule(
            COUNTDOWN, self.settings.countdown_refresh_ms, lambda: self._run_countdown(generation)
        )

    def _run_coupon(self, generation: int) -> None:
        if generation != self._generation or not self.active:
            return
        self.refresh_coupon()
        if generation == self._generation and self.active:
            self.scheduler.schedule(
                COUPON, self.settings.coupon_refresh_ms, lambda: self._run_coupon(generation)
            )

    def _run_countdown(self, generation: int) -> None:
        if generation != self._generation or not self.active:
            return
        self.tick_countdown()
        if generation == self._generation and self.active:
            self.scheduler.schedule(
                COUNTDOWN,
                self.settings.countdown_refresh_ms,
                lambda: self._run_countdown(generation),
            )


__all__ = ["BALANCES", "COUNTDOWN", "COUPON", "SessionRuntime"]
