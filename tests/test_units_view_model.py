# Area: Presentation Tests
"""Tests for unit conversion and view-model rows."""

from decimal import Decimal

import pytest

from tests.helpers import ALICE, BOB, HOUSE, ZERO
from rps_dapp._chain.units import format_display, from_display, to_display
from rps_dapp._sync.view_model import (
    history_row,
    open_round_row,
    outcome_banner,
    short_address,
)
from rps_dapp.types import Choice, Outcome, Round

ETH = 10 ** 18


class TestUnits:
    """Tests for display unit conversion."""

    def test_to_display(self):
        assert to_display(ETH) == Decimal("1")
        assert to_display(0) == Decimal("0")

    def test_from_display(self):
        assert from_display("0.5") == ETH // 2
        assert from_display(2) == 2 * ETH
        assert from_display(" 1.25 ") == 125 * ETH // 100

    def test_from_display_rejects_garbage(self):
        with pytest.raises(ValueError):
            from_display("lots")

    def test_from_display_rejects_negative(self):
        with pytest.raises(ValueError):
            from_display("-1")

    @pytest.mark.parametrize("value", ["nan", "NaN", "sNaN", "inf", "-Infinity"])
    def test_from_display_rejects_non_finite(self, value):
        with pytest.raises(ValueError, match="finite"):
            from_display(value)

    def test_format_display(self):
        assert format_display(ETH) == "1 ETH"
        assert format_display(3 * ETH // 2) == "1.5 ETH"
        assert format_display(0) == "0 ETH"


class TestRows:
    """Tests for table rows."""

    def test_open_row_marks_own_round(self):
        rnd = Round(round_id=5, player1=ALICE, bet_amount=ETH)
        assert open_round_row(rnd, ALICE).player == "YOU"
        row = open_round_row(rnd, BOB)
        assert row.player == short_address(ALICE)
        assert row.stake == "1"

    def test_history_row_winner_column(self):
        rnd = Round(round_id=5, player1=ALICE, player2=BOB, choice1=Choice.ROCK,
                    choice2=Choice.SCISSORS, bet_amount=ETH, winner=ALICE)
        row = history_row(rnd, ALICE)
        assert row.player1 == "YOU - R"
        assert row.player2 == f"{short_address(BOB)} - S"
        assert row.winner_column == 1

    def test_history_row_house_and_draw(self):
        rnd = Round(round_id=2, is_solo=True, player1=BOB, player2=HOUSE,
                    choice1=Choice.PAPER, choice2=Choice.PAPER, bet_amount=ETH, winner=ZERO)
        row = history_row(rnd, ALICE, house=HOUSE)
        assert row.player2 == "House - P"
        assert row.winner_column is None

    def test_short_address(self):
        assert short_address("0xabcdef0123") == "0xabcd.."
        assert short_address(None) == "?"


class TestBanner:
    """Tests for outcome banners."""

    @pytest.mark.parametrize("outcome,text", [
        (Outcome.WIN, "Round 5: You win!"),
        (Outcome.LOSE, "Round 5: You lost!"),
        (Outcome.DRAW, "Round 5: Draw!"),
    ])
    def test_banner(self, outcome, text):
        assert outcome_banner(5, outcome) == text
