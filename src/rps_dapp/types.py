"""
rps_dapp.types — Round, event and result types
==============================================

This module documents the data the client reconstructs from the ledger
program and the shapes handed back by the lifecycle operations.

All types are exported from the main package:

    from rps_dapp import Round, Choice, EventRecord, ...

Amounts are always integers in the ledger's smallest unit. Conversion to
display units happens only at the presentation edge (see
``rps_dapp._chain.units``).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================
# Moves, outcomes and sentinels
# ============================================

class Choice(IntEnum):
    """A move. The integer value is the on-chain encoding."""
    ROCK = 0
    PAPER = 1
    SCISSORS = 2

    @classmethod
    def parse(cls, value: Any) -> "Choice":
        """Accept a Choice, its integer value, or a name/initial ("rock", "R")."""
        if isinstance(value, Choice):
            return value
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().upper()
        if text.isdigit():
            return cls(int(text))
        for choice in cls:
            if choice.name == text or choice.name[0] == text:
                return choice
        raise ValueError(f"Unknown choice: {value!r}")

    @property
    def letter(self) -> str:
        return self.name[0]


class Outcome(Enum):
    """Result of a round from the active account's point of view."""
    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"


class RoundStatus(Enum):
    OPEN = "open"
    RESOLVED = "resolved"


# Winner value the ledger program emits for a draw
DRAW_ADDRESS = "0x0000000000000000000000000000000000000000"

ROUND_CREATED = "RoundCreated"
ROUND_RESOLVED = "RoundResolved"
TOPICS: Tuple[str, ...] = (ROUND_CREATED, ROUND_RESOLVED)


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    """Compare two account identifiers ignoring checksum casing."""
    if not a or not b:
        return False
    return a.lower() == b.lower()


def is_draw_address(address: Optional[str]) -> bool:
    if address is None:
        return False
    return same_address(address, DRAW_ADDRESS) or address in ("0", "0x0")


# ============================================
# Event args (validated from raw log args)
# ============================================

class RoundCreatedArgs(BaseModel):
    """Args of ``RoundCreated(roundId, isSolo, player1, betAmount)``."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    round_id: int = Field(alias="roundId", ge=0)
    is_solo: bool = Field(alias="isSolo")
    player1: str
    bet_amount: int = Field(alias="betAmount", ge=0)


class RoundResolvedArgs(BaseModel):
    """Args of ``RoundResolved(roundId, player1, player2, choice1, choice2, betAmount, winner)``."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    round_id: int = Field(alias="roundId", ge=0)
    player1: str
    player2: str
    choice1: Choice
    choice2: Choice
    bet_amount: int = Field(alias="betAmount", ge=0)
    winner: str


# ============================================
# Materialized view entries
# ============================================

@dataclass
class Round:
    """
    A single game instance as reconstructed from ledger events.

    ``status`` is derived: a round is resolved once a ``RoundResolved``
    has recorded its winner (the zero address for a draw).
    """
    round_id: int
    is_solo: bool = False
    player1: Optional[str] = None
    player2: Optional[str] = None
    choice1: Optional[Choice] = None
    choice2: Optional[Choice] = None
    bet_amount: int = 0
    winner: Optional[str] = None
    created_block: Optional[int] = None
    resolved_block: Optional[int] = None

    @property
    def status(self) -> RoundStatus:
        if self.winner is not None:
            return RoundStatus.RESOLVED
        return RoundStatus.OPEN

    @property
    def is_draw(self) -> bool:
        return self.winner is not None and is_draw_address(self.winner)

    def involves(self, account: Optional[str]) -> bool:
        return same_address(self.player1, account) or same_address(self.player2, account)


@dataclass(frozen=True)
class EventRecord:
    """
    One contract-emitted event.

    Identity is the log position ``(block_number, log_index)`` within its
    topic; ``args`` and ``tx_hash`` do not take part in equality.
    """
    topic: str
    block_number: int
    log_index: int
    args: Dict[str, Any] = field(default_factory=dict, compare=False)
    tx_hash: Optional[str] = field(default=None, compare=False)

    @property
    def log_id(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)


# ============================================
# Lifecycle results
# ============================================

@dataclass
class TxResult:
    """A mined transaction and the contract events decoded from its receipt."""
    tx_hash: str
    events: List[EventRecord] = field(default_factory=list)

    def first(self, topic: str) -> Optional[EventRecord]:
        for event in self.events:
            if event.topic == topic:
                return event
        return None


@dataclass
class RoundOutcome:
    """Result of a solo round, settled against the house in one transaction."""
    round: Round
    tx_hash: str


@dataclass
class SecretRound:
    """
    Result of creating a secret round.

    ``secret`` must be shown to the player and is needed for the reveal;
    nothing else keeps it.
    """
    round_id: int
    secret: str
    commitment: str
    tx_hash: str
