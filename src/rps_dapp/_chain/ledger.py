# Area: Chain
"""
rps_dapp._chain.ledger — Ledger program and wallet interfaces
=============================================================

Defines the interfaces the client needs from the remote ledger program and
the wallet, plus their ``AsyncWeb3`` implementations.

Every adapter failure is re-raised as ``LedgerCallError`` so callers only
deal with one exception type; the original exception is chained.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Union

from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError
from web3.logs import DISCARD

from ..errors import LedgerCallError
from ..types import TOPICS, Choice, EventRecord, TxResult

logger = logging.getLogger("rps_dapp.chain.ledger")


class LedgerProgram(Protocol):
    """Calls the client issues against the RPS ledger program."""

    address: str

    async def jackpot(self) -> int: ...

    async def play_solo_round(self, choice: Choice, stake: int, sender: str) -> TxResult: ...

    async def create_secret_round(self, commitment: bytes, stake: int, sender: str) -> TxResult: ...

    async def join_secret_round(
        self, round_id: int, choice: Choice, stake: int, sender: str
    ) -> TxResult: ...

    async def reveal_choice(
        self, round_id: int, choice: Choice, secret: str, sender: str
    ) -> TxResult: ...

    async def block_number(self) -> int: ...

    async def all_events(
        self, from_block: int = 0, to_block: Optional[int] = None
    ) -> List[EventRecord]: ...

    def stream(
        self, topic: str, from_block: int, poll_interval: float
    ) -> AsyncIterator[EventRecord]: ...


class WalletProvider(Protocol):
    """Source of the currently active account."""

    async def get_active_account(self) -> Optional[str]: ...


def load_abi(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load a contract ABI.

    Accepts a Truffle/Hardhat artifact (``{"abi": [...], ...}``) or a bare
    ABI list.

    Raises:
        ValueError: If the file holds neither
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and isinstance(data.get("abi"), list):
        return data["abi"]
    if isinstance(data, list):
        return data
    raise ValueError(f"No ABI found in {path}")


def _to_record(event: Any) -> EventRecord:
    """Convert a web3 EventData into an EventRecord."""
    tx_hash = event.get("transactionHash")
    return EventRecord(
        topic=event["event"],
        block_number=int(event["blockNumber"]),
        log_index=int(event["logIndex"]),
        args=dict(event["args"]),
        tx_hash=AsyncWeb3.to_hex(tx_hash) if tx_hash is not None else None,
    )


class Web3Ledger:
    """
    ``LedgerProgram`` backed by an ``AsyncWeb3`` contract.

    Usage:
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider("http://localhost:8545"))
        ledger = Web3Ledger(w3, "0x...", load_abi("RPS.json"))
        amount = await ledger.jackpot()
    """

    def __init__(self, w3: AsyncWeb3, address: str, abi: List[Dict[str, Any]]):
        self.w3 = w3
        self.address = AsyncWeb3.to_checksum_address(address)
        self._contract = w3.eth.contract(address=self.address, abi=abi)

    @classmethod
    def connect(cls, rpc_url: str, address: str, abi_path: Union[str, Path]) -> "Web3Ledger":
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        return cls(w3, address, load_abi(abi_path))

    # ── Reads ────────────────────────────────────────────────

    async def jackpot(self) -> int:
        try:
            return int(await self._contract.functions.jackpot().call())
        except Exception as e:
            raise LedgerCallError("jackpot", str(e)) from e

    async def block_number(self) -> int:
        try:
            return int(await self.w3.eth.block_number)
        except Exception as e:
            raise LedgerCallError("blockNumber", str(e)) from e

    async def _get_logs(
        self, topic: str, from_block: int, to_block: Optional[Union[int, str]] = None
    ) -> List[EventRecord]:
        event = getattr(self._contract.events, topic)()
        try:
            logs = await event.get_logs(
                from_block=from_block,
                to_block=to_block if to_block is not None else "latest",
            )
        except Exception as e:
            raise LedgerCallError(f"getLogs:{topic}", str(e)) from e
        return [_to_record(log) for log in logs]

    async def all_events(
        self, from_block: int = 0, to_block: Optional[int] = None
    ) -> List[EventRecord]:
        """Historical fetch of both topics. Order is not guaranteed."""
        records: List[EventRecord] = []
        for topic in TOPICS:
            records.extend(await self._get_logs(topic, from_block, to_block))
        logger.debug(f"Fetched {len(records)} historical events from block {from_block}")
        return records

    async def stream(
        self, topic: str, from_block: int, poll_interval: float
    ) -> AsyncIterator[EventRecord]:
        """
        Yield new events of one topic, in log order, by polling.

        The first poll re-reads ``from_block`` itself; duplicates are left
        to the caller's cursor.
        """
        next_block = from_block
        while True:
            head = await self.block_number()
            if head >= next_block:
                records = await self._get_logs(topic, next_block, head)
                for record in sorted(records, key=lambda r: r.sort_key):
                    yield record
                next_block = head + 1
            await asyncio.sleep(poll_interval)

    # ── Transactions ─────────────────────────────────────────

    async def _transact(self, method: str, call: Any, tx: Dict[str, Any]) -> TxResult:
        try:
            tx_hash = await call.transact(tx)
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except ContractLogicError as e:
            raise LedgerCallError(method, str(e), reverted=True) from e
        except Exception as e:
            raise LedgerCallError(method, str(e)) from e

        if receipt.get("status") == 0:
            raise LedgerCallError(method, "transaction reverted", reverted=True)

        events: List[EventRecord] = []
        for topic in TOPICS:
            decoded = getattr(self._contract.events, topic)().process_receipt(
                receipt, errors=DISCARD
            )
            events.extend(_to_record(event) for event in decoded)
        events.sort(key=lambda r: r.sort_key)

        result = TxResult(tx_hash=AsyncWeb3.to_hex(tx_hash), events=events)
        logger.info(f"{method} mined in tx {result.tx_hash} ({len(events)} events)")
        return result

    async def play_solo_round(self, choice: Choice, stake: int, sender: str) -> TxResult:
        call = self._contract.functions.playSoloRound(int(choice))
        return await self._transact("playSoloRound", call, {"from": sender, "value": stake})

    async def create_secret_round(self, commitment: bytes, stake: int, sender: str) -> TxResult:
        call = self._contract.functions.createSecretRound(commitment)
        return await self._transact("createSecretRound", call, {"from": sender, "value": stake})

    async def join_secret_round(
        self, round_id: int, choice: Choice, stake: int, sender: str
    ) -> TxResult:
        call = self._contract.functions.joinSecretRound(round_id, int(choice))
        return await self._transact("joinSecretRound", call, {"from": sender, "value": stake})

    async def reveal_choice(
        self, round_id: int, choice: Choice, secret: str, sender: str
    ) -> TxResult:
        call = self._contract.functions.revealChoice(round_id, int(choice), secret)
        return await self._transact("revealChoice", call, {"from": sender})


class Web3Wallet:
    """``WalletProvider`` reporting the node's first unlocked account."""

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3

    async def get_active_account(self) -> Optional[str]:
        try:
            accounts = await self.w3.eth.accounts
        except Exception as e:
            raise LedgerCallError("accounts", str(e)) from e
        return accounts[0] if accounts else None
