from __future__ import annotations

import logging
from dataclasses import dataclass

from bondflow.domain.config import COUPON_PAYMENT
from bondflow.domain.entities import Address, CouponState, TxReceipt
from bondflow.domain.ports import LedgerPort, UseCaseError
from bondflow.usecases.error_mapping import map_ledger_error

log = logging.getLogger(__name__)


@dataclass
class ClaimCoupon:
    """Manually claim a due coupon.

    The claim is refused locally when the last known state says nothing is
    claimable, so no doomed transaction is submitted.
    """

    ledger: LedgerPort

    def __call__(self, state: CouponState, signer: Address) -> TxReceipt:
        if not state.can_claim:
            raise UseCaseError("COUPON_NOT_CLAIMABLE", "No coupon is available to claim yet.")
        try:
            receipt = self.ledger.send(COUPON_PAYMENT, "claimCoupon", (), signer)
        except Exception as exc:
            raise map_ledger_error(
                exc, default_code="CLAIM_FAILED", default_message="Failed to claim coupon."
            ) from exc
        log.info("Coupon claimed by %s: %s", signer, receipt)
        return receipt
