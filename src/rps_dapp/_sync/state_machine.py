# Area: Sync
"""
rps_dapp._sync.state_machine — Subscription State Machine
=========================================================

Tracks the lifecycle of one topic subscription:
Idle → Subscribing → Streaming → (Error → Subscribing).
"""

import logging
from typing import Optional

from .enums import SyncState, SyncEvent

logger = logging.getLogger("rps_dapp.sync.state_machine")


# Valid state transitions: {current_state: {event: next_state}}
TRANSITIONS = {
    SyncState.IDLE: {
        SyncEvent.SUBSCRIBE: SyncState.SUBSCRIBING,
    },
    SyncState.SUBSCRIBING: {
        SyncEvent.REPLAY_COMPLETE: SyncState.STREAMING,
        SyncEvent.TRANSPORT_ERROR: SyncState.ERROR,
        SyncEvent.RESYNC: SyncState.SUBSCRIBING,
    },
    SyncState.STREAMING: {
        SyncEvent.TRANSPORT_ERROR: SyncState.ERROR,
        SyncEvent.RESYNC: SyncState.SUBSCRIBING,
    },
    SyncState.ERROR: {
        SyncEvent.RETRY: SyncState.SUBSCRIBING,
        SyncEvent.RESYNC: SyncState.SUBSCRIBING,
    },
}


class SubscriptionStateMachine:
    """
    State machine for one event topic subscription.

    Attributes:
        topic: The event topic this machine tracks
        current_state: The current state of the state machine
        last_error: Reason of the most recent transport error, if any
    """

    def __init__(self, topic: str):
        """Initialize state machine in IDLE."""
        self.topic = topic
        self.current_state = SyncState.IDLE
        self.last_error: Optional[str] = None

    def can_transition(self, event: SyncEvent) -> bool:
        """
        Check if a transition is valid from current state.

        Args:
            event: The event to check

        Returns:
            True if the transition is valid, False otherwise
        """
        if event == SyncEvent.STOP:
            return True
        valid_transitions = TRANSITIONS.get(self.current_state, {})
        return event in valid_transitions

    def transition(self, event: SyncEvent, reason: Optional[str] = None) -> SyncState:
        """
        Execute a state transition.

        Args:
            event: The event triggering the transition
            reason: Error reason, recorded for TRANSPORT_ERROR

        Returns:
            The new state after transition

        Raises:
            ValueError: If the transition is not valid
        """
        if not self.can_transition(event):
            raise ValueError(
                f"Invalid transition for {self.topic}: "
                f"{event.value} from {self.current_state.value}"
            )

        if event == SyncEvent.STOP:
            next_state = SyncState.IDLE
        else:
            next_state = TRANSITIONS[self.current_state][event]

        if event == SyncEvent.TRANSPORT_ERROR:
            self.last_error = reason
        logger.debug(
            f"[{self.topic}] {self.current_state.value} → {next_state.value} ({event.value})",
            extra={"topic": self.topic},
        )
        self.current_state = next_state
        return next_state

    @property
    def is_streaming(self) -> bool:
        return self.current_state == SyncState.STREAMING

    def reset(self) -> None:
        """Reset state machine to initial state."""
        self.current_state = SyncState.IDLE
        self.last_error = None
