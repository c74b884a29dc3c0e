# Area: Sync Tests
"""Tests for the per-topic subscription state machine."""

import pytest

from rps_dapp._sync.enums import SyncEvent, SyncState
from rps_dapp._sync.state_machine import SubscriptionStateMachine


class TestSubscriptionStateMachineBase:
    """Tests for basic state machine functionality."""

    def test_initial_state_is_idle(self):
        sm = SubscriptionStateMachine("RoundCreated")
        assert sm.current_state == SyncState.IDLE
        assert sm.last_error is None

    def test_can_transition_returns_true_for_valid(self):
        sm = SubscriptionStateMachine("RoundCreated")
        assert sm.can_transition(SyncEvent.SUBSCRIBE) is True

    def test_can_transition_returns_false_for_invalid(self):
        sm = SubscriptionStateMachine("RoundCreated")
        assert sm.can_transition(SyncEvent.REPLAY_COMPLETE) is False

    def test_transition_raises_on_invalid(self):
        sm = SubscriptionStateMachine("RoundCreated")
        with pytest.raises(ValueError):
            sm.transition(SyncEvent.RETRY)


class TestSubscriptionStateMachineTransitions:
    """Tests for specific state transitions."""

    def test_happy_path(self):
        sm = SubscriptionStateMachine("RoundResolved")
        sm.transition(SyncEvent.SUBSCRIBE)
        assert sm.current_state == SyncState.SUBSCRIBING
        sm.transition(SyncEvent.REPLAY_COMPLETE)
        assert sm.current_state == SyncState.STREAMING
        assert sm.is_streaming is True

    def test_error_then_retry(self):
        sm = SubscriptionStateMachine("RoundResolved")
        sm.transition(SyncEvent.SUBSCRIBE)
        sm.transition(SyncEvent.REPLAY_COMPLETE)
        sm.transition(SyncEvent.TRANSPORT_ERROR, "socket closed")
        assert sm.current_state == SyncState.ERROR
        assert sm.last_error == "socket closed"
        sm.transition(SyncEvent.RETRY)
        assert sm.current_state == SyncState.SUBSCRIBING

    def test_error_during_replay(self):
        sm = SubscriptionStateMachine("RoundCreated")
        sm.transition(SyncEvent.SUBSCRIBE)
        sm.transition(SyncEvent.TRANSPORT_ERROR, "timeout")
        assert sm.current_state == SyncState.ERROR

    def test_resync_from_streaming(self):
        sm = SubscriptionStateMachine("RoundCreated")
        sm.transition(SyncEvent.SUBSCRIBE)
        sm.transition(SyncEvent.REPLAY_COMPLETE)
        sm.transition(SyncEvent.RESYNC)
        assert sm.current_state == SyncState.SUBSCRIBING

    def test_cannot_stream_from_error(self):
        sm = SubscriptionStateMachine("RoundCreated")
        sm.transition(SyncEvent.SUBSCRIBE)
        sm.transition(SyncEvent.TRANSPORT_ERROR)
        assert sm.can_transition(SyncEvent.REPLAY_COMPLETE) is False

    @pytest.mark.parametrize("state", list(SyncState))
    def test_stop_always_allowed(self, state):
        sm = SubscriptionStateMachine("RoundCreated")
        sm.current_state = state
        assert sm.transition(SyncEvent.STOP) == SyncState.IDLE

    def test_reset(self):
        sm = SubscriptionStateMachine("RoundCreated")
        sm.transition(SyncEvent.SUBSCRIBE)
        sm.transition(SyncEvent.TRANSPORT_ERROR, "x")
        sm.reset()
        assert sm.current_state == SyncState.IDLE
        assert sm.last_error is None
