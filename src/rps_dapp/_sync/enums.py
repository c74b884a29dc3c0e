# Area: Sync
"""
rps_dapp._sync.enums — Subscription State Machine Enums
=======================================================

Defines the states and events for the per-topic event subscription
state machine.
"""

from enum import Enum


class SyncState(Enum):
    """
    States of a topic subscription.

    State transitions:
    IDLE -> SUBSCRIBING (on SUBSCRIBE)
    SUBSCRIBING -> STREAMING (on REPLAY_COMPLETE)
    SUBSCRIBING -> ERROR (on TRANSPORT_ERROR)
    STREAMING -> ERROR (on TRANSPORT_ERROR)
    ERROR -> SUBSCRIBING (on RETRY)
    STREAMING -> SUBSCRIBING (on RESYNC)
    SUBSCRIBING -> SUBSCRIBING (on RESYNC)
    Any state -> IDLE (on STOP)
    """
    IDLE = "IDLE"
    SUBSCRIBING = "SUBSCRIBING"
    STREAMING = "STREAMING"
    ERROR = "ERROR"


class SyncEvent(Enum):
    """
    Events that trigger state transitions.

    Events are triggered by:
    - SUBSCRIBE: synchronizer session started
    - REPLAY_COMPLETE: historical replay applied, live delivery begins
    - TRANSPORT_ERROR: the event stream raised
    - RETRY: reconnect delay elapsed
    - RESYNC: active account changed, session restarted
    - STOP: synchronizer stopped
    """
    SUBSCRIBE = "SUBSCRIBE"
    REPLAY_COMPLETE = "REPLAY_COMPLETE"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    RETRY = "RETRY"
    RESYNC = "RESYNC"
    STOP = "STOP"
