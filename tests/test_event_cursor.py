# Area: Sync Tests
"""Tests for EventCursor deduplication."""

from tests.helpers import created, resolved
from rps_dapp._sync.event_cursor import EventCursor
from rps_dapp.types import ROUND_CREATED


class TestEventCursorDedup:
    """Tests for per-log identity deduplication."""

    def test_first_delivery_applies(self):
        cursor = EventCursor()
        assert cursor.should_apply(created(1, block=10)) is True

    def test_redelivery_is_dropped(self):
        cursor = EventCursor()
        record = created(1, block=10)
        cursor.should_apply(record)
        assert cursor.should_apply(created(1, block=10)) is False

    def test_same_block_different_log_index_both_apply(self):
        """Two events of one topic in a single block are distinct."""
        cursor = EventCursor()
        assert cursor.should_apply(created(1, block=10, log_index=0)) is True
        assert cursor.should_apply(created(2, block=10, log_index=1)) is True

    def test_topics_tracked_separately(self):
        cursor = EventCursor()
        assert cursor.should_apply(created(1, block=10, log_index=0)) is True
        assert cursor.should_apply(resolved(1, block=10, log_index=0)) is True

    def test_older_block_still_applies(self):
        """Out-of-order delivery within the horizon is not mistaken for a duplicate."""
        cursor = EventCursor()
        cursor.should_apply(created(2, block=20))
        assert cursor.should_apply(created(1, block=15)) is True

    def test_has_applied_is_read_only(self):
        cursor = EventCursor()
        record = created(1, block=10)
        assert cursor.has_applied(record) is False
        assert cursor.should_apply(record) is True


class TestEventCursorEviction:
    """Tests for the eviction horizon."""

    def test_entries_behind_horizon_count_as_applied(self):
        cursor = EventCursor(retain_blocks=5)
        cursor.should_apply(created(1, block=1))
        cursor.should_apply(created(2, block=20))
        # Block 3 is behind the horizon (20 - 5) and is never re-applied
        assert cursor.should_apply(created(9, block=3)) is False

    def test_entries_inside_horizon_kept(self):
        cursor = EventCursor(retain_blocks=5)
        cursor.should_apply(created(1, block=16))
        cursor.should_apply(created(2, block=20))
        assert cursor.should_apply(created(1, block=16)) is False
        assert cursor.should_apply(created(3, block=17)) is True

    def test_old_blocks_evicted_from_memory(self):
        cursor = EventCursor(retain_blocks=2)
        for block in range(1, 50):
            cursor.should_apply(created(block, block=block))
        assert len(cursor._seen[ROUND_CREATED]) <= 3

    def test_no_eviction_when_unbounded(self):
        cursor = EventCursor(retain_blocks=None)
        cursor.should_apply(created(2, block=1000))
        assert cursor.should_apply(created(1, block=1)) is True


class TestEventCursorBookkeeping:
    """Tests for mark_all, highest_block and reset."""

    def test_mark_all_counts_new(self):
        cursor = EventCursor()
        records = [created(1, block=1), created(1, block=1), resolved(1, block=2)]
        assert cursor.mark_all(records) == 2

    def test_highest_block(self):
        cursor = EventCursor()
        assert cursor.highest_block(ROUND_CREATED) is None
        cursor.mark_all([created(1, block=4), created(2, block=9), created(3, block=7)])
        assert cursor.highest_block(ROUND_CREATED) == 9

    def test_reset_forgets_everything(self):
        cursor = EventCursor(retain_blocks=1)
        cursor.mark_all([created(1, block=1), created(2, block=10)])
        cursor.reset()
        assert cursor.should_apply(created(1, block=1)) is True
        assert cursor.highest_block(ROUND_CREATED) == 1
