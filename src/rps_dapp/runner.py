# Area: Sync
"""
rps_dapp.runner — Client Runner
===============================

Wires the ledger adapter, session, synchronizer, account watcher and
lifecycle client together and runs the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any, Dict, Optional, Sequence

from ._chain.ledger import LedgerProgram, WalletProvider, Web3Ledger, Web3Wallet
from ._chain.lifecycle_client import RoundLifecycleClient
from ._chain.units import format_display
from ._runner_config import validate_config
from ._shared import enable_view_mode, setup_logging
from ._sync.account_watcher import AccountWatcher
from ._sync.event_cursor import EventCursor
from ._sync.notifier import BaseViewObserver, ViewNotifier, ViewObserver
from ._sync.round_store import RoundStore
from ._sync.session import ClientSession
from ._sync.synchronizer import EventSynchronizer
from ._sync.view_model import history_row, open_round_row, outcome_banner
from .types import Outcome, Round

logger = logging.getLogger("rps_dapp")


class ConsoleObserver(BaseViewObserver):
    """Renders the round view to stdout."""

    def __init__(self, session: ClientSession, house: Optional[str] = None):
        self.session = session
        self.house = house

    def _open_line(self, rnd: Round) -> str:
        row = open_round_row(rnd, self.session.account)
        return f"  open  #{row.round_id:<5} {row.player:<10} {row.stake}"

    def _history_line(self, rnd: Round) -> str:
        row = history_row(rnd, self.session.account, self.house)
        mark = {1: " *", 2: "  "}.get(row.winner_column, " =")
        return f"  done  #{row.round_id:<5} {row.player1:<16} {row.player2:<16} {row.stake}{mark}"

    def on_snapshot(self, open_rounds: Sequence[Round], resolved_rounds: Sequence[Round]) -> None:
        print(f"── Open rounds ({len(open_rounds)}) " + "─" * 40)
        for rnd in open_rounds:
            print(self._open_line(rnd))
        print(f"── Last rounds ({len(resolved_rounds)}) " + "─" * 40)
        for rnd in resolved_rounds:
            print(self._history_line(rnd))

    def on_open_round_added(self, round: Round) -> None:
        print(self._open_line(round))

    def on_round_resolved(self, round: Round) -> None:
        print(self._history_line(round))

    def on_jackpot_changed(self, amount: int) -> None:
        print(f"Jackpot: {format_display(amount)}")

    def on_account_changed(self, account: Optional[str]) -> None:
        print(f"Account: {account or 'none'}")

    def on_round_outcome(self, round_id: int, outcome: Outcome) -> None:
        print(outcome_banner(round_id, outcome))


class RpsClientRunner:
    """
    Client runner.

    Keeps the round view synchronized for the active account and exposes
    ``lifecycle`` for player actions.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        observer: Optional[ViewObserver] = None,
        ledger: Optional[LedgerProgram] = None,
        wallet: Optional[WalletProvider] = None,
    ):
        self.config = validate_config(config)
        setup_logging(log_file_path=self.config.log_file, level=self.config.log_level)

        if ledger is None:
            ledger = Web3Ledger.connect(
                self.config.rpc_url, self.config.contract_address, self.config.abi_path
            )
        if wallet is None:
            wallet = Web3Wallet(ledger.w3)

        self.session = ClientSession(ledger=ledger)
        self.notifier = ViewNotifier()
        self.notifier.register(observer or ConsoleObserver(self.session, ledger.address))
        self.store = RoundStore()
        self.synchronizer = EventSynchronizer(
            self.session,
            store=self.store,
            cursor=EventCursor(self.config.cursor_retain_blocks),
            notifier=self.notifier,
            from_block=self.config.from_block,
            poll_interval=self.config.event_poll_interval,
            reconnect_delay=self.config.reconnect_delay,
            history_window=self.config.history_window,
        )
        self.watcher = AccountWatcher(wallet, poll_interval=self.config.account_poll_interval)
        self.watcher.on_change(self._on_account_change)
        self.lifecycle = RoundLifecycleClient(
            self.session,
            secret_length=self.config.secret_length,
            event_sink=self.synchronizer.ingest_local,
        )

    async def connect(self) -> Optional[str]:
        """Read the active account and make it the session's baseline."""
        account = await self.watcher.current_account()
        self.watcher.prime(account)
        self.session.switch_account(account)
        self.notifier.account_changed(account)
        return account

    async def _on_account_change(self, old: Optional[str], new: Optional[str]) -> None:
        await self.synchronizer.resync(new)

    async def run_async(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Synchronize until ``stop_event`` is set (or SIGINT in ``run``)."""
        stop = stop_event or asyncio.Event()
        await self.connect()
        self._log_startup()

        await self.synchronizer.start()
        watcher_task = asyncio.create_task(self.watcher.run(stop))
        try:
            await stop.wait()
        finally:
            stop.set()
            await watcher_task
            await self.synchronizer.stop()
            logger.info("Client runner stopped.")

    def run(self) -> None:
        """Start the event loop. Blocks until interrupted."""
        enable_view_mode()

        async def _main() -> None:
            stop = asyncio.Event()
            try:
                asyncio.get_running_loop().add_signal_handler(signal.SIGINT, stop.set)
            except NotImplementedError:
                pass
            await self.run_async(stop)

        try:
            asyncio.run(_main())
        except KeyboardInterrupt:
            logger.info("Interrupted")

    def _log_startup(self) -> None:
        """Log startup information."""
        logger.info("=" * 60)
        logger.info("  RPS Client — Starting")
        logger.info(f"  Node:     {self.config.rpc_url}")
        logger.info(f"  Contract: {self.config.contract_address}")
        logger.info(f"  Account:  {self.session.account or 'none'}")
        logger.info(f"  Poll:     account every {self.config.account_poll_interval}s, "
                    f"events every {self.config.event_poll_interval}s")
        logger.info("=" * 60)
