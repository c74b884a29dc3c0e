# Area: Sync
"""
Sync - Client-side round synchronization.

This package handles:
- Event deduplication (EventCursor)
- The materialized round view (RoundStore)
- Per-topic subscription lifecycle (SubscriptionStateMachine)
- Event ingestion and resync (EventSynchronizer)
- Active account polling (AccountWatcher)
- View-model notifications (ViewNotifier)
"""

from .enums import SyncState, SyncEvent
from .state_machine import SubscriptionStateMachine
from .event_cursor import EventCursor
from .round_store import RoundStore
from .session import ClientSession
from .notifier import BaseViewObserver, ViewNotifier, ViewObserver, outcome_for
from .account_watcher import AccountWatcher
from .synchronizer import EventSynchronizer

__all__ = [
    "SyncState",
    "SyncEvent",
    "SubscriptionStateMachine",
    "EventCursor",
    "RoundStore",
    "ClientSession",
    "BaseViewObserver",
    "ViewNotifier",
    "ViewObserver",
    "outcome_for",
    "AccountWatcher",
    "EventSynchronizer",
]
