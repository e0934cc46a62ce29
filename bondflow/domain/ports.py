from __future__ import annotations
from typing import Any, Protocol, Sequence

from bondflow.domain.entities import Address, ContractName, TxReceipt


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class LedgerPort(Protocol):
    """Read/send operations against the external ledger.

    Contracts are addressed by logical name (``usdt``, ``bond_token``,
    ``price_oracle``, ``subscription``, ``coupon_payment``). ``send`` returns
    once the ledger accepts the transaction, not once it is final; no retry
    happens behind either call.
    """

    def read(
        self, contract: ContractName, method: str, args: Sequence[Any] = ()
    ) -> Any: ...  # raises RemoteReadError
    def send(
        self,
        contract: ContractName,
        method: str,
        args: Sequence[Any],
        signer: Address,
    ) -> TxReceipt: ...  # raises RemoteSendError
    def address_of(self, contract: ContractName) -> Address: ...


class SettingsStorePort(Protocol):
    """Persistence for runtime settings."""

    def load_settings(self) -> dict: ...
    def save_settings(self, payload: dict) -> None: ...
