# Area: Sync
"""
rps_dapp._sync.account_watcher — Active account polling
=======================================================

Wallet providers do not reliably push account changes, so the active
account is polled on a fixed interval (100 ms by default) and compared
with the previously observed value.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from ..errors import LedgerCallError
from .._chain.ledger import WalletProvider

logger = logging.getLogger("rps_dapp.sync.account")

DEFAULT_POLL_INTERVAL = 0.1

ChangeHandler = Callable[[Optional[str], Optional[str]], Union[None, Awaitable[None]]]


class AccountWatcher:
    """
    Polls the wallet and reports account changes.

    Usage:
        watcher = AccountWatcher(wallet)
        watcher.on_change(lambda old, new: ...)
        watcher.prime(await watcher.current_account())
        await watcher.run(stop_event)
    """

    def __init__(self, wallet: WalletProvider, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.wallet = wallet
        self.poll_interval = poll_interval
        self._handlers: List[ChangeHandler] = []
        self._last: Optional[str] = None
        self._primed = False

    @property
    def last_account(self) -> Optional[str]:
        return self._last

    async def current_account(self) -> Optional[str]:
        return await self.wallet.get_active_account()

    def on_change(self, handler: ChangeHandler) -> None:
        """Register ``handler(old, new)``; sync or async callables both work."""
        self._handlers.append(handler)

    def prime(self, account: Optional[str]) -> None:
        """Set the baseline account without firing handlers."""
        self._last = account
        self._primed = True

    async def poll_once(self) -> bool:
        """
        One polling tick.

        Returns:
            True if the account changed and handlers ran
        """
        try:
            account = await self.current_account()
        except LedgerCallError as e:
            logger.warning(f"Account poll failed: {e}")
            return False

        if not self._primed:
            self.prime(account)
            return False
        if account == self._last:
            return False

        old, self._last = self._last, account
        logger.info(f"Account changed: {old} → {account}")
        for handler in list(self._handlers):
            try:
                result = handler(old, account)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Account change handler failed: {e}", exc_info=True)
        return True

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll until ``stop_event`` is set."""
        while not stop_event.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass
