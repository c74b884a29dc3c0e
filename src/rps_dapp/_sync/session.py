# Area: Sync
"""
rps_dapp._sync.session — Client session context
===============================================

Holds what would otherwise be ambient globals: the ledger handle, the
active account and the epoch token.

Every replay, subscription and externally-resumed callback captures the
epoch when it starts and checks it again before mutating shared state. A
resync starts a new epoch, which turns all older work into no-ops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..errors import StaleEpoch

if TYPE_CHECKING:
    from .._chain.ledger import LedgerProgram

logger = logging.getLogger("rps_dapp.sync.session")


@dataclass
class ClientSession:
    """Explicit per-client context threaded through every operation."""
    ledger: "LedgerProgram"
    account: Optional[str] = None
    epoch: int = 0

    def begin_epoch(self) -> int:
        """Start a new epoch, invalidating all work tagged with older ones."""
        self.epoch += 1
        logger.debug(f"Epoch {self.epoch} started", extra={"epoch": self.epoch})
        return self.epoch

    def is_current(self, epoch: int) -> bool:
        return epoch == self.epoch

    def ensure_current(self, epoch: int) -> None:
        """
        Raises:
            StaleEpoch: If a newer epoch has started since ``epoch``
        """
        if epoch != self.epoch:
            raise StaleEpoch(epoch, self.epoch)

    def switch_account(self, account: Optional[str]) -> bool:
        """Set the active account. Returns True if it changed."""
        if account == self.account:
            return False
        logger.info(f"Active account: {self.account} → {account}")
        self.account = account
        return True
