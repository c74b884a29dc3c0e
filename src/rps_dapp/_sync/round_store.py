# Area: Sync
"""
rps_dapp._sync.round_store — Materialized round view
====================================================

In-memory projection of ledger events into rounds, split into an open
partition (non-solo rounds waiting for an opponent or a reveal) and a
resolved partition (in resolution order).

Both apply operations are idempotent and commutative enough to tolerate a
local optimistic insertion racing the streamed copy of the same event:

- a resolved round never goes back to open
- choices and players are write-once; an empty value never overwrites a
  recorded one
- resolving an already-resolved round is a no-op
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from ..types import (
    ROUND_CREATED,
    ROUND_RESOLVED,
    EventRecord,
    Round,
    RoundCreatedArgs,
    RoundResolvedArgs,
)

logger = logging.getLogger("rps_dapp.sync.store")

DEFAULT_HISTORY_WINDOW = 7

CreatedArgs = Union[RoundCreatedArgs, Mapping[str, Any]]
ResolvedArgs = Union[RoundResolvedArgs, Mapping[str, Any]]


class RoundStore:
    """
    roundId → Round, with open and resolved partitions kept disjoint.

    Mutated only through ``apply_created`` / ``apply_resolved`` (or
    ``apply`` / ``replay``, which dispatch to them).
    """

    def __init__(self) -> None:
        self._rounds: Dict[int, Round] = {}
        self._created: Set[int] = set()
        self._open: Dict[int, Round] = {}
        self._resolved_order: List[int] = []
        self._resolved: Set[int] = set()

    # ── Mutation ─────────────────────────────────────────────

    def apply_created(
        self, args: CreatedArgs, block_number: Optional[int] = None
    ) -> Optional[Round]:
        """
        Record a RoundCreated.

        Returns:
            The round if it newly entered the open partition, else None
        """
        if not isinstance(args, RoundCreatedArgs):
            args = RoundCreatedArgs.model_validate(args)

        rnd = self._rounds.get(args.round_id)
        if rnd is None:
            rnd = self._rounds[args.round_id] = Round(round_id=args.round_id)

        if args.round_id not in self._created:
            self._created.add(args.round_id)
            rnd.is_solo = args.is_solo
            rnd.player1 = rnd.player1 or args.player1
            rnd.bet_amount = rnd.bet_amount or args.bet_amount
            rnd.created_block = block_number

        if rnd.is_solo or args.round_id in self._resolved or args.round_id in self._open:
            return None

        self._open[args.round_id] = rnd
        logger.debug(f"Round {args.round_id} opened", extra={"round_id": args.round_id})
        return rnd

    def apply_resolved(
        self, args: ResolvedArgs, block_number: Optional[int] = None
    ) -> Optional[Round]:
        """
        Record a RoundResolved and move the round to the resolved partition.

        Returns:
            The round if it was newly resolved, else None
        """
        if not isinstance(args, RoundResolvedArgs):
            args = RoundResolvedArgs.model_validate(args)

        if args.round_id in self._resolved:
            return None

        rnd = self._rounds.get(args.round_id)
        if rnd is None:
            rnd = self._rounds[args.round_id] = Round(round_id=args.round_id)

        rnd.player1 = rnd.player1 or args.player1
        rnd.player2 = rnd.player2 or args.player2
        if rnd.choice1 is None:
            rnd.choice1 = args.choice1
        if rnd.choice2 is None:
            rnd.choice2 = args.choice2
        rnd.bet_amount = rnd.bet_amount or args.bet_amount
        rnd.winner = args.winner
        rnd.resolved_block = block_number

        self._open.pop(args.round_id, None)
        self._resolved.add(args.round_id)
        self._resolved_order.append(args.round_id)
        logger.debug(f"Round {args.round_id} resolved", extra={"round_id": args.round_id})
        return rnd

    def apply(self, record: EventRecord) -> Optional[Round]:
        """Dispatch one event record by topic."""
        if record.topic == ROUND_CREATED:
            return self.apply_created(record.args, record.block_number)
        if record.topic == ROUND_RESOLVED:
            return self.apply_resolved(record.args, record.block_number)
        logger.warning(f"Ignoring event with unknown topic: {record.topic}")
        return None

    def replay(self, events: Iterable[EventRecord]) -> int:
        """
        Rebuild from a full historical scan.

        Historical fetch order is not emission order, so events are sorted
        by (block_number, log_index) first.

        Returns:
            Number of events applied
        """
        self.clear()
        ordered = sorted(events, key=lambda e: e.sort_key)
        for record in ordered:
            self.apply(record)
        logger.info(
            f"Replayed {len(ordered)} events: "
            f"{len(self._open)} open, {len(self._resolved)} resolved"
        )
        return len(ordered)

    def clear(self) -> None:
        self._rounds.clear()
        self._created.clear()
        self._open.clear()
        self._resolved_order.clear()
        self._resolved.clear()

    # ── Queries ──────────────────────────────────────────────

    def get(self, round_id: int) -> Optional[Round]:
        return self._rounds.get(round_id)

    def list_open(self) -> List[Round]:
        """Open non-solo rounds, ascending by round id."""
        return [self._open[k] for k in sorted(self._open)]

    def list_resolved(self, limit: Optional[int] = DEFAULT_HISTORY_WINDOW) -> List[Round]:
        """Resolved rounds, most recently resolved first."""
        ids = self._resolved_order[::-1]
        if limit is not None:
            ids = ids[:limit]
        return [self._rounds[k] for k in ids]

    def is_open(self, round_id: int) -> bool:
        return round_id in self._open

    def is_resolved(self, round_id: int) -> bool:
        return round_id in self._resolved

    def __contains__(self, round_id: object) -> bool:
        return round_id in self._rounds

    def __len__(self) -> int:
        return len(self._rounds)
