# Area: Chain
"""
rps_dapp._chain.commitment — Secret commitment codec
====================================================

A creator submits ``keccak256(secret ‖ uint256(choice))`` instead of the
plaintext choice. The ledger program recomputes the same hash from the
disclosed pair at reveal time, so the payload layout must match Solidity's
``abi.encodePacked(string secret, uint256 choice)`` byte for byte:

    utf8(secret) + choice as 32-byte big-endian unsigned integer

A divergent layout does not raise anywhere; it makes every legitimate
reveal fail on-chain. ``tests/test_commitment.py`` pins the layout to fixed
reference vectors.
"""

from __future__ import annotations

import hmac
import secrets
import string
from typing import Union

from web3 import Web3

from ..types import Choice

SECRET_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
MIN_SECRET_LENGTH = 16
CHOICE_WIDTH = 32


def generate_secret(length: int = MIN_SECRET_LENGTH) -> str:
    """
    Generate a reveal secret from a CSPRNG.

    Args:
        length: Number of alphanumeric symbols (at least 16)

    Returns:
        The secret string

    Raises:
        ValueError: If length is below the minimum
    """
    if length < MIN_SECRET_LENGTH:
        raise ValueError(
            f"Secret length {length} is below the minimum of {MIN_SECRET_LENGTH}"
        )
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


def encode_payload(secret: str, choice: Union[Choice, int]) -> bytes:
    """Build the packed payload the ledger program hashes."""
    if not secret:
        raise ValueError("Secret must not be empty")
    choice = Choice(int(choice))
    return secret.encode("utf-8") + int(choice).to_bytes(CHOICE_WIDTH, "big")


def commit(secret: str, choice: Union[Choice, int]) -> bytes:
    """Compute the 32-byte commitment hash for (secret, choice)."""
    return bytes(Web3.keccak(encode_payload(secret, choice)))


def commit_hex(secret: str, choice: Union[Choice, int]) -> str:
    """Commitment as a 0x-prefixed hex string."""
    return "0x" + commit(secret, choice).hex()


def _as_bytes(commitment: Union[bytes, str]) -> bytes:
    if isinstance(commitment, (bytes, bytearray)):
        return bytes(commitment)
    text = commitment[2:] if commitment.startswith(("0x", "0X")) else commitment
    return bytes.fromhex(text)


def verify(commitment: Union[bytes, str], secret: str, choice: Union[Choice, int]) -> bool:
    """Check that (secret, choice) opens the given commitment."""
    try:
        expected = _as_bytes(commitment)
        actual = commit(secret, choice)
    except ValueError:
        return False
    return hmac.compare_digest(expected, actual)
