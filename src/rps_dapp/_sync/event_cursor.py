# Area: Sync
"""
rps_dapp._sync.event_cursor — Applied-event cursor
==================================================

Remembers which events have already been applied so that a node replay or
a reconnect cannot apply them twice.

Identity is the log position ``(block_number, log_index)`` per topic. A
single "latest block" counter is not enough: one block can carry several
events of the same topic, and a reconnect redelivers whole blocks.

Memory is bounded with an eviction horizon: only the last
``retain_blocks`` blocks behind the highest block seen keep per-log
entries; anything older than the horizon counts as applied.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Set

from ..types import EventRecord

logger = logging.getLogger("rps_dapp.sync.cursor")

DEFAULT_RETAIN_BLOCKS = 256


class EventCursor:
    """
    Per-topic record of applied log identities.

    Usage:
        cursor = EventCursor()
        if cursor.should_apply(record):
            store.apply(record)
    """

    def __init__(self, retain_blocks: Optional[int] = DEFAULT_RETAIN_BLOCKS):
        """
        Args:
            retain_blocks: Blocks kept behind the highest one seen, or None
                to never evict
        """
        self.retain_blocks = retain_blocks
        self._seen: Dict[str, Dict[int, Set[int]]] = {}
        self._highest: Dict[str, int] = {}
        self._horizon: Dict[str, int] = {}

    def has_applied(self, record: EventRecord) -> bool:
        """Read-only check whether ``record`` was already applied."""
        horizon = self._horizon.get(record.topic)
        if horizon is not None and record.block_number < horizon:
            return True
        block = self._seen.get(record.topic, {}).get(record.block_number)
        return block is not None and record.log_index in block

    def should_apply(self, record: EventRecord) -> bool:
        """
        Mark ``record`` as applied.

        Returns:
            True the first time a log identity is seen, False afterwards
        """
        if self.has_applied(record):
            logger.debug(
                f"Duplicate {record.topic} at {record.log_id} dropped",
                extra={
                    "topic": record.topic,
                    "block_number": record.block_number,
                    "log_index": record.log_index,
                },
            )
            return False

        topic_seen = self._seen.setdefault(record.topic, {})
        topic_seen.setdefault(record.block_number, set()).add(record.log_index)
        if record.block_number > self._highest.get(record.topic, -1):
            self._highest[record.topic] = record.block_number
            self._evict(record.topic)
        return True

    def mark_all(self, records: Iterable[EventRecord]) -> int:
        """Mark a batch (e.g. a historical replay). Returns how many were new."""
        return sum(1 for record in records if self.should_apply(record))

    def highest_block(self, topic: str) -> Optional[int]:
        return self._highest.get(topic)

    def _evict(self, topic: str) -> None:
        if self.retain_blocks is None:
            return
        horizon = self._highest[topic] - self.retain_blocks
        if horizon <= self._horizon.get(topic, 0):
            return
        self._horizon[topic] = horizon
        topic_seen = self._seen[topic]
        for block in [b for b in topic_seen if b < horizon]:
            del topic_seen[block]

    def reset(self) -> None:
        """Forget everything (used by a full resync)."""
        self._seen.clear()
        self._highest.clear()
        self._horizon.clear()
        logger.debug("Cursor reset")
