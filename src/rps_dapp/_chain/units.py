# Area: Chain
"""Monetary unit conversion at the presentation edge (1 ether = 10**18 wei)."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from web3 import Web3

DISPLAY_UNIT = "ether"


def to_display(amount: int) -> Decimal:
    """Smallest-unit integer → display amount."""
    return Decimal(Web3.from_wei(int(amount), DISPLAY_UNIT))


def from_display(value: Union[str, int, float, Decimal]) -> int:
    """
    Display amount → smallest-unit integer.

    Raises:
        ValueError: If the value is not a non-negative number
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    if amount < 0:
        raise ValueError(f"Amount must not be negative: {value!r}")
    return int(Web3.to_wei(amount, DISPLAY_UNIT))


def format_display(amount: int) -> str:
    """Render a smallest-unit amount as e.g. '1.5 ETH'."""
    return f"{to_display(amount).normalize():f} ETH"
