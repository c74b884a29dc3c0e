"""
rps_dapp — Commit-Reveal Rock-Paper-Scissors Client
===================================================

Keeps a local view of rounds on a Rock-Paper-Scissors ledger program in
sync with its event log, and drives the round lifecycle (solo play,
secret commit, join, reveal) for the wallet's active account.

Quick Start:
    from rps_dapp import RpsClientRunner
    runner = RpsClientRunner(config={
        "rpc_url": "http://localhost:8545",
        "contract_address": "0x...",
        "abi_path": "build/contracts/RPS.json",
    })
    runner.run()

Player actions:
    account = await runner.connect()
    created = await runner.lifecycle.create_secret_round(Choice.ROCK, stake)
    ...
    await runner.lifecycle.reveal_choice(created.round_id, Choice.ROCK, created.secret)

Custom rendering:
    from rps_dapp import BaseViewObserver
    class MyView(BaseViewObserver): ...   # Override the hooks you need
    runner = RpsClientRunner(config=config, observer=MyView())
"""

from ._chain.commitment import commit, commit_hex, generate_secret, verify
from ._chain.lifecycle_client import RoundLifecycleClient
from ._sync import (
    AccountWatcher,
    BaseViewObserver,
    ClientSession,
    EventCursor,
    EventSynchronizer,
    RoundStore,
    ViewNotifier,
    ViewObserver,
)
from .errors import (
    RpsDappError,
    LedgerCallError,
    TransactionRejected,
    CommitmentMismatch,
    SubscriptionError,
    StaleEpoch,
)
from .runner import ConsoleObserver, RpsClientRunner
from .types import (
    Choice,
    Outcome,
    RoundStatus,
    Round,
    RoundCreatedArgs,
    RoundResolvedArgs,
    EventRecord,
    TxResult,
    RoundOutcome,
    SecretRound,
)

__all__ = [
    # Main classes
    "RpsClientRunner",
    "ConsoleObserver",
    "RoundLifecycleClient",
    "EventSynchronizer",
    "AccountWatcher",
    "RoundStore",
    "EventCursor",
    "ClientSession",
    "ViewNotifier",
    "ViewObserver",
    "BaseViewObserver",
    # Commitments
    "commit",
    "commit_hex",
    "generate_secret",
    "verify",
    # Errors
    "RpsDappError",
    "LedgerCallError",
    "TransactionRejected",
    "CommitmentMismatch",
    "SubscriptionError",
    "StaleEpoch",
    # Types
    "Choice",
    "Outcome",
    "RoundStatus",
    "Round",
    "RoundCreatedArgs",
    "RoundResolvedArgs",
    "EventRecord",
    "TxResult",
    "RoundOutcome",
    "SecretRound",
]
__version__ = "1.0.0"
