"""Command-line entry point: ``python -m bondflow.app.main <command>``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from ..adapters.ledger_mock import DEFAULT_ISSUER, LedgerMock
from ..adapters.storage_local import StorageLocal
from ..domain.config import BOND, BOND_TOKEN, PAYMENT_TOKEN, SUBSCRIPTION, USDT
from ..domain.entities import Session, StatusEvent
from ..domain.errors import LedgerError
from ..domain.ports import UseCaseError
from ..domain.util import format_address
from ..utils import logging as logging_utils
from ..viewmodels.settings_vm import SettingsVM
from .controller import AppController

log = logging.getLogger(__name__)

RPC_URL_ENV = "BONDFLOW_RPC_URL"
MOCK_ACCOUNT = "0x" + "ab" * 20
_TOKENS = {"usdt": PAYMENT_TOKEN, "bond": BOND}


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI args."""
    parser = argparse.ArgumentParser(
        prog="bondflow", description="Subscribe, redeem and claim bond coupons."
    )
    parser.add_argument("--account", help="Connected wallet address.")
    parser.add_argument("--chain-id", type=int, help="Chain id reported by the wallet.")
    parser.add_argument("--rpc-url", help=f"JSON-RPC endpoint (env {RPC_URL_ENV}).")
    parser.add_argument("--settings-dir", default=".", help="Directory of the settings file.")
    parser.add_argument("--mock", action="store_true", help="Use the in-memory ledger.")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)
    p_sub = sub.add_parser("subscribe", help="Buy bonds for an amount of USDt.")
    p_sub.add_argument("amount")
    p_sub.add_argument("--approve", action="store_true", help="Approve the amount first.")
    p_red = sub.add_parser("redeem", help="Sell bonds back to the issuer.")
    p_red.add_argument("amount")
    p_red.add_argument("--approve", action="store_true", help="Approve the amount first.")
    p_app = sub.add_parser("approve", help="Approve the subscription contract.")
    p_app.add_argument("token", choices=sorted(_TOKENS))
    p_app.add_argument("amount")
    sub.add_parser("price", help="Request a price update and wait for it.")
    sub.add_parser("claim", help="Claim a due coupon.")
    sub.add_parser("coupon", help="Show coupon status.")
    sub.add_parser("balances", help="Show balances and price.")
    p_status = sub.add_parser("status", help="Run the system diagnostics.")
    p_status.add_argument("--amount", default="", help="Preview a subscription amount.")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace, storage: StorageLocal) -> SettingsVM:
    """Persisted settings, then environment, then CLI flags."""
    settings = SettingsVM(on_save=storage.save_settings)
    settings.apply_dict(storage.load_settings())
    env_rpc = os.getenv(RPC_URL_ENV)
    if env_rpc:
        settings.rpc_url = env_rpc
    if args.rpc_url:
        settings.rpc_url = args.rpc_url
    if args.mock:
        settings.use_mock = True
    return settings


def seed_demo_ledger(settings: SettingsVM, account: str) -> LedgerMock:
    """In-memory ledger with a funded account and issuer."""
    ledger = LedgerMock(
        contracts=dict(settings.contracts),
        pending_price_cents=10000,
        price_update_delay_reads=1,
    )
    spender = ledger.address_of(SUBSCRIPTION)
    ledger.set_balance(USDT, account, 100000)
    ledger.set_balance(USDT, DEFAULT_ISSUER, 10000000)
    ledger.set_balance(BOND_TOKEN, DEFAULT_ISSUER, 100000)
    ledger.set_allowance(USDT, DEFAULT_ISSUER, spender, 10000000)
    ledger.set_allowance(BOND_TOKEN, DEFAULT_ISSUER, spender, 100000)
    return ledger


def _print_status(event: Optional[StatusEvent], explorer_url: str) -> None:
    if event is None:
        return
    print(f"[{event.kind}] {event.message}")
    link = event.explorer_url(explorer_url)
    if link:
        print(f"  {link}")


def run(args: argparse.Namespace) -> int:
    storage = StorageLocal(root_dir=args.settings_dir)
    settings = load_settings(args, storage)
    logging_utils.apply_verbosity(args.verbose or settings.debug_logging)

    account = args.account or (MOCK_ACCOUNT if settings.use_mock else None)
    ledger = seed_demo_ledger(settings, account) if settings.use_mock and account else None
    controller = AppController(settings, ledger=ledger)
    if not controller.ensure_ready():
        print("Settings are incomplete; set rpc_url and contract addresses.", file=sys.stderr)
        return 2
    controller.status.subscribe(lambda ev: _print_status(ev, settings.config.explorer_url))

    session = None
    if account:
        session = Session(account=account, chain_id=args.chain_id or settings.chain_id)
    try:
        return _dispatch(args, controller, session)
    finally:
        controller.reset()


def _dispatch(args: argparse.Namespace, controller: AppController, session: Optional[Session]) -> int:
    trade, coupon = controller.trade_vm, controller.coupon_vm
    if session is None:
        controller.status.error("Please connect wallet first.")
        return 1
    controller.runtime.attach(session)
    log.debug("Running %s for %s", args.command, format_address(session.account))

    try:
        if args.command == "subscribe":
            trade.subscribe_amount = args.amount
            if args.approve and not trade.cmd_approve(PAYMENT_TOKEN):
                return 1
            return 0 if trade.cmd_subscribe().ok else 1
        if args.command == "redeem":
            trade.redeem_amount = args.amount
            if args.approve and not trade.cmd_approve(BOND):
                return 1
            return 0 if trade.cmd_redeem().ok else 1
        if args.command == "approve":
            token = _TOKENS[args.token]
            if token is PAYMENT_TOKEN:
                trade.subscribe_amount = args.amount
            else:
                trade.redeem_amount = args.amount
            return 0 if trade.cmd_approve(token) else 1
        if args.command == "price":
            price = trade.cmd_update_price()
            return 0 if price.is_available else 1
        if args.command == "claim":
            coupon.refresh()
            return 0 if coupon.cmd_claim() else 1
        if args.command == "coupon":
            coupon.cmd_check_status()
            return 0
        if args.command == "balances":
            snapshot = controller.runtime.uc_fetch_balances(session.account)
            trade.apply_balances(snapshot)
            print(f"Account: {format_address(session.account)}")
            print(f"{PAYMENT_TOKEN.symbol}: {trade.usdt_label}")
            print(f"{BOND.symbol}: {trade.bond_label}")
            print(f"Price: {trade.price_label}")
            return 0
        if args.command == "status":
            trade.subscribe_amount = args.amount
            return 0 if trade.cmd_check_status() is not None else 1
    except (UseCaseError, LedgerError) as exc:
        controller.status.error(exc.message)
        return 1
    raise ValueError(f"Unknown command {args.command!r}")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint."""
    logging_utils.configure_root(logging.WARNING)
    return run(_parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
