# Area: Chain
"""
Chain - Everything that talks to the ledger program.

This package handles:
- The secret commitment codec
- Ledger program and wallet interfaces (and their web3 adapters)
- Monetary unit conversion
- Round lifecycle actions (see ``lifecycle_client``)
"""

from .commitment import commit, commit_hex, encode_payload, generate_secret, verify
from .ledger import LedgerProgram, WalletProvider, Web3Ledger, Web3Wallet, load_abi
from .units import format_display, from_display, to_display

__all__ = [
    "commit",
    "commit_hex",
    "encode_payload",
    "generate_secret",
    "verify",
    "LedgerProgram",
    "WalletProvider",
    "Web3Ledger",
    "Web3Wallet",
    "load_abi",
    "format_display",
    "from_display",
    "to_display",
]
