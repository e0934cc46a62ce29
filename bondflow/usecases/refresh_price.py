"""Use case that requests an oracle price update and waits for a reading."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from bondflow.domain.config import PRICE_ORACLE
from bondflow.domain.entities import Address, Price, TxReceipt
from bondflow.domain.ports import LedgerPort

log = logging.getLogger(__name__)

DEFAULT_MAX_WAIT_MS = 10000
DEFAULT_POLL_INTERVAL_MS = 1000


def _noop_receipt(_: TxReceipt) -> None:
    """Default hook when nobody listens for the request receipt."""


@dataclass
class RefreshPrice:
    """Best-effort price convergence wait.

    The oracle may keep reporting the same value after a refresh request; the
    last observed reading is returned when the wait budget runs out, never an
    error. A zero reading counts as "not published yet" and keeps the loop
    polling.

    Attributes:
        ledger: Gateway used for the request and the reads.
        poll_interval_ms: Delay between reads.
        sleep: Blocking sleep in seconds, injectable for tests.
        clock: Monotonic clock in seconds, injectable for tests.
        on_requested: Called with the receipt of the update request.
    """

    ledger: LedgerPort
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic
    on_requested: Callable[[TxReceipt], None] = _noop_receipt

    def __call__(self, signer: Address, max_wait_ms: Optional[int] = None) -> Price:
        """Request an update, then poll the oracle until a price shows up.

        Args:
            signer: Account submitting ``requestPriceUpdate``.
            max_wait_ms: Poll budget, defaults to 10 seconds.

        Returns:
            Price: Last oracle reading observed.

        Raises:
            RemoteSendError: The update request was rejected.
            RemoteReadError: An oracle read failed.
        """
        budget_ms = DEFAULT_MAX_WAIT_MS if max_wait_ms is None else max(0, int(max_wait_ms))
        interval_s = max(1, int(self.poll_interval_ms)) / 1000.0

        receipt = self.ledger.send(PRICE_ORACLE, "requestPriceUpdate", (), signer)
        log.info("Price update requested (%s)", receipt.tx_hash)
        self.on_requested(receipt)

        started = self.clock()
        price = self._read()
        polls = 0
        while (self.clock() - started) * 1000.0 < budget_ms:
            self.sleep(interval_s)
            price = self._read()
            polls += 1
            if price.initialized:
                break

        if price.initialized:
            log.info("Oracle price %d cents after %d poll(s)", price.raw, polls)
        else:
            log.warning("Oracle price still unset after %d poll(s)", polls)
        return price

    def _read(self) -> Price:
        return Price.from_reading(self.ledger.read(PRICE_ORACLE, "getLatestPriceUSD", ()))


__all__ = ["DEFAULT_MAX_WAIT_MS", "DEFAULT_POLL_INTERVAL_MS", "RefreshPrice"]
