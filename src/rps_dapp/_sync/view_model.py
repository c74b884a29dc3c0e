# Area: Sync
"""
rps_dapp._sync.view_model — Table rows and banners
==================================================

Presentation-edge helpers that turn rounds into the rows and banner text
a renderer shows. This is the only place amounts are converted to display
units.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .._chain.units import to_display
from ..types import Choice, Outcome, Round, same_address

BANNERS = {
    Outcome.WIN: "You win!",
    Outcome.LOSE: "You lost!",
    Outcome.DRAW: "Draw!",
}


@dataclass(frozen=True)
class OpenRoundRow:
    round_id: int
    player: str
    stake: str


@dataclass(frozen=True)
class HistoryRow:
    round_id: int
    player1: str
    player2: str
    stake: str
    winner_column: Optional[int]  # 1 or 2, None for a draw


def short_address(address: Optional[str]) -> str:
    if not address:
        return "?"
    return address[:6] + ".."


def _label(address: Optional[str], account: Optional[str], house: Optional[str]) -> str:
    if same_address(address, account):
        return "YOU"
    if same_address(address, house):
        return "House"
    return short_address(address)


def _choice_letter(choice: Optional[Choice]) -> str:
    return choice.letter if choice is not None else "?"


def open_round_row(round: Round, account: Optional[str]) -> OpenRoundRow:
    return OpenRoundRow(
        round_id=round.round_id,
        player=_label(round.player1, account, None),
        stake=f"{to_display(round.bet_amount).normalize():f}",
    )


def history_row(round: Round, account: Optional[str], house: Optional[str] = None) -> HistoryRow:
    """Row for the last-rounds table, e.g. ``5 | YOU - R | 0xabcd.. - S | 1``."""
    winner_column = None
    if not round.is_draw:
        if same_address(round.winner, round.player1):
            winner_column = 1
        elif same_address(round.winner, round.player2):
            winner_column = 2
    return HistoryRow(
        round_id=round.round_id,
        player1=f"{_label(round.player1, account, house)} - {_choice_letter(round.choice1)}",
        player2=f"{_label(round.player2, account, house)} - {_choice_letter(round.choice2)}",
        stake=f"{to_display(round.bet_amount).normalize():f}",
        winner_column=winner_column,
    )


def outcome_banner(round_id: int, outcome: Outcome) -> str:
    return f"Round {round_id}: {BANNERS[outcome]}"
