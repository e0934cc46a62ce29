"""Ledger adapter backed by ``web3`` over a JSON-RPC HTTP provider.

Purpose:
    Implement :class:`bondflow.domain.ports.LedgerPort` for a live EVM node or
    wallet-backed RPC endpoint.

Dependencies:
    - ``web3`` for ABI encoding, contract calls and transaction submission.
    - ``requests`` (through ``bondflow.adapters.http_client``) for transport.

Call context:
    Built by ``bondflow.app.controller.AppController`` from settings. Use cases
    only ever see the port.

Transactions are submitted with ``{"from": signer}`` and signed by the node or
wallet provider; the adapter returns as soon as the ledger hands back a
transaction hash and never waits for a receipt.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from web3 import HTTPProvider, Web3

from bondflow.adapters.contract_abi import CONTRACT_ABIS, Abi
from bondflow.adapters.http_client import HttpConfig, build_session
from bondflow.domain.entities import Address, ContractName, TxReceipt
from bondflow.domain.errors import RemoteReadError, RemoteSendError

log = logging.getLogger(__name__)


class Web3LedgerAdapter:
    """``LedgerPort`` implementation over ``web3.Web3``."""

    def __init__(
        self,
        *,
        contracts: Mapping[ContractName, Address],
        rpc_url: Optional[str] = None,
        http: Optional[HttpConfig] = None,
        abis: Optional[Mapping[ContractName, Abi]] = None,
        web3: Optional[Web3] = None,
    ) -> None:
        """Create the adapter.

        Args:
            contracts: Logical contract name to deployed address.
            rpc_url: JSON-RPC endpoint; required unless ``web3`` is supplied.
            http: Timeout and API-key settings for the HTTP provider.
            abis: ABI table override, defaults to ``CONTRACT_ABIS``.
            web3: Pre-built client, used by tests and embedding callers.
        """
        self.contracts: Dict[ContractName, Address] = dict(contracts)
        self.abis: Dict[ContractName, Abi] = dict(abis or CONTRACT_ABIS)
        if web3 is None:
            if not rpc_url:
                raise ValueError("Web3LedgerAdapter requires rpc_url or web3.")
            cfg = http or HttpConfig()
            provider = HTTPProvider(
                rpc_url,
                request_kwargs=cfg.request_kwargs(),
                session=build_session(cfg),
                exception_retry_configuration=None,
            )
            web3 = Web3(provider)
        self.w3 = web3
        self._bound: Dict[ContractName, Any] = {}

    # ---------- LedgerPort ----------

    def address_of(self, contract: ContractName) -> Address:
        try:
            return self.contracts[contract]
        except KeyError:
            raise ValueError(f"Unknown contract '{contract}'.") from None

    def read(self, contract: ContractName, method: str, args: Sequence[Any] = ()) -> Any:
        context = f"call {contract}.{method}"
        try:
            result = self._function(contract, method, args).call()
        except Exception as exc:
            message = _describe(exc)
            log.debug("%s failed: %s", context, message)
            raise RemoteReadError(
                message, contract=contract, method=method, context=context
            ) from exc
        log.debug("%s -> %r", context, result)
        return _normalize(result)

    def send(
        self,
        contract: ContractName,
        method: str,
        args: Sequence[Any],
        signer: Address,
    ) -> TxReceipt:
        context = f"send {contract}.{method}"
        try:
            tx_hash = self._function(contract, method, args).transact(
                {"from": _checksum(signer)}
            )
        except Exception as exc:
            message = _describe(exc)
            log.debug("%s failed: %s", context, message)
            raise RemoteSendError(
                message, contract=contract, method=method, context=context
            ) from exc
        receipt = TxReceipt(tx_hash=Web3.to_hex(tx_hash))
        log.info("%s submitted: %s", context, receipt.tx_hash)
        return receipt

    # ---------- Internals ----------

    def _contract(self, contract: ContractName) -> Any:
        bound = self._bound.get(contract)
        if bound is None:
            abi = self.abis.get(contract)
            if abi is None:
                raise ValueError(f"No ABI registered for contract '{contract}'.")
            bound = self.w3.eth.contract(
                address=_checksum(self.address_of(contract)), abi=abi
            )
            self._bound[contract] = bound
        return bound

    def _function(self, contract: ContractName, method: str, args: Sequence[Any]) -> Any:
        fn = getattr(self._contract(contract).functions, method)
        return fn(*[_encode_arg(arg) for arg in args])


def _checksum(address: str) -> str:
    return Web3.to_checksum_address(address)


def _encode_arg(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("0x") and len(value) == 42:
        return _checksum(value)
    return value


def _normalize(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_normalize(item) for item in value)
    if isinstance(value, tuple):
        return tuple(_normalize(item) for item in value)
    return value


def _describe(exc: Exception) -> str:
    text = str(exc).strip()
    return text or exc.__class__.__name__


__all__ = ["Web3LedgerAdapter"]
