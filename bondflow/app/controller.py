"""Adapter and use-case wiring for the bondflow runtime.

This module owns lazy construction of the ledger adapter, the use cases and
the view-models that depend on values in
:class:`bondflow.viewmodels.settings_vm.SettingsVM`. The CLI calls
``ensure_ready`` once before running any command.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..adapters.http_client import HttpConfig
from ..adapters.ledger_mock import LedgerMock
from ..domain.ports import LedgerPort
from ..usecases.approve_token import ApproveToken
from ..usecases.check_system_status import CheckSystemStatus
from ..usecases.claim_coupon import ClaimCoupon
from ..usecases.coupon_coordinator import CouponCoordinator
from ..usecases.fetch_balances import FetchBalances
from ..usecases.fetch_coupon_status import FetchCouponStatus
from ..usecases.refresh_price import RefreshPrice
from ..usecases.trade_flow_coordinator import FlowHooks, TradeFlowCoordinator
from ..viewmodels.coupon_vm import CouponVM
from ..viewmodels.settings_vm import SettingsVM
from ..viewmodels.status_channel import StatusChannel
from ..viewmodels.trade_vm import TradeVM
from .polling_scheduler import PollingScheduler, ThreadTimerBackend
from .session_runtime import SessionRuntime

log = logging.getLogger(__name__)


class AppController:
    """Create and cache the runtime graph from settings state.

    Call chain:
        ``bondflow.app.main`` creates one instance, calls ``ensure_ready`` and
        then drives ``trade_vm`` / ``coupon_vm`` commands. ``reset`` drops the
        graph so the next ``ensure_ready`` rebuilds it from current settings.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        ledger: Optional[LedgerPort] = None,
        scheduler: Optional[PollingScheduler] = None,
        status: Optional[StatusChannel] = None,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings state holding RPC URL, contract addresses and
                timing preferences.
            ledger: Pre-built ledger port; overrides the settings-driven choice.
            scheduler: Timer owner; defaults to thread timers.
            status: Shared status channel; a fresh one is created otherwise.
        """
        self.settings_vm = settings_vm
        self.status = status or StatusChannel()
        self._ledger_override = ledger
        self._scheduler_override = scheduler
        self._ledger: Optional[LedgerPort] = None
        self.runtime: Optional[SessionRuntime] = None
        self.coordinator: Optional[TradeFlowCoordinator] = None
        self.trade_vm: Optional[TradeVM] = None
        self.coupon_vm: Optional[CouponVM] = None

    @property
    def ledger(self) -> Optional[LedgerPort]:
        """Return the cached ledger port."""
        return self._ledger

    def reset(self) -> None:
        """Stop background timers and drop every cached object."""
        if self.runtime is not None:
            self.runtime.stop()
        self._ledger = None
        self.runtime = None
        self.coordinator = None
        self.trade_vm = None
        self.coupon_vm = None

    def ensure_ready(self) -> bool:
        """Ensure the ledger, use cases and view-models exist.

        Returns:
            ``True`` when the graph is available, ``False`` when the settings
            are incomplete (no RPC URL or a missing contract address).
        """
        if self._ledger is not None and self.trade_vm is not None:
            return True
        if not self.settings_vm.is_valid():
            log.warning("Settings incomplete; cannot build ledger adapter")
            return False

        self._ledger = self._ledger_override or self._build_ledger()
        cfg = self.settings_vm.config
        ledger = self._ledger

        scheduler = self._scheduler_override
        if scheduler is None:
            backend = ThreadTimerBackend()
            scheduler = PollingScheduler(backend.schedule, backend.cancel)
        self.runtime = SessionRuntime(
            scheduler=scheduler,
            uc_fetch_balances=FetchBalances(ledger),
            settings=cfg,
        )

        uc_refresh_price = RefreshPrice(ledger, poll_interval_ms=cfg.price_poll_interval_ms)
        self.coordinator = TradeFlowCoordinator(
            ledger,
            cfg,
            self.status.publish,
            uc_refresh_price=uc_refresh_price,
            coupon=CouponCoordinator(ledger, self.status.publish),
            hooks=FlowHooks(on_completed=self.runtime.notify_operation_completed),
        )
        self.trade_vm = TradeVM(
            coordinator=self.coordinator,
            status=self.status,
            session=self.runtime.current_session,
            uc_approve=ApproveToken(ledger),
            uc_refresh_price=uc_refresh_price,
            uc_check_status=CheckSystemStatus(ledger),
            display_precision=cfg.balance_display_precision,
            price_decimals=cfg.price_decimals,
        )
        self.coupon_vm = CouponVM(
            status=self.status,
            session=self.runtime.current_session,
            uc_fetch=FetchCouponStatus(ledger),
            uc_claim=ClaimCoupon(ledger),
        )
        self.runtime.bind(
            on_balances=self.trade_vm.apply_balances,
            refresh_coupon=self.coupon_vm.refresh,
            tick_countdown=self.coupon_vm.tick,
        )
        return True

    def _build_ledger(self) -> LedgerPort:
        cfg = self.settings_vm.config
        if self.settings_vm.use_mock:
            log.info("Using offline ledger mock")
            return LedgerMock(contracts=dict(cfg.contracts))

        # web3 is only loaded for live RPC use.
        from ..adapters.ledger_web3 import Web3LedgerAdapter

        log.info("Connecting to %s", cfg.rpc_url)
        return Web3LedgerAdapter(
            contracts=cfg.contracts,
            rpc_url=cfg.rpc_url,
            http=HttpConfig(
                request_timeout_s=cfg.request_timeout_s,
                api_key=self.settings_vm.api_key or None,
            ),
        )


__all__ = ["AppController"]
