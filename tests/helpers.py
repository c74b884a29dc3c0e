# Area: Test Fixtures
"""Fakes and record builders for the ledger program, the wallet and the view."""

import asyncio
from typing import Dict, List, Optional

from rps_dapp._sync.notifier import BaseViewObserver
from rps_dapp.errors import LedgerCallError
from rps_dapp.types import ROUND_CREATED, ROUND_RESOLVED, TOPICS, EventRecord, TxResult

HOUSE = "0x00000000000000000000000000000000000000C0"
ALICE = "0x00000000000000000000000000000000000000AA"
BOB = "0x00000000000000000000000000000000000000BB"
CAROL = "0x00000000000000000000000000000000000000CC"
ZERO = "0x0000000000000000000000000000000000000000"


def created(round_id, block, log_index=0, player1=ALICE, bet=1, is_solo=False):
    """Build a RoundCreated record."""
    return EventRecord(
        topic=ROUND_CREATED,
        block_number=block,
        log_index=log_index,
        args={"roundId": round_id, "isSolo": is_solo, "player1": player1, "betAmount": bet},
    )


def resolved(round_id, block, log_index=0, player1=ALICE, player2=BOB,
             choice1=0, choice2=2, bet=1, winner=ALICE):
    """Build a RoundResolved record."""
    return EventRecord(
        topic=ROUND_RESOLVED,
        block_number=block,
        log_index=log_index,
        args={
            "roundId": round_id,
            "player1": player1,
            "player2": player2,
            "choice1": choice1,
            "choice2": choice2,
            "betAmount": bet,
            "winner": winner,
        },
    )


class FakeLedger:
    """
    In-memory LedgerProgram.

    ``events`` is the historical log. Live delivery goes through ``push``;
    pushing an exception makes that topic's stream raise it, pushing None
    ends the stream.
    """

    address = HOUSE

    def __init__(self, events: Optional[List[EventRecord]] = None, head: int = 0, jackpot: int = 0):
        self.events: List[EventRecord] = list(events or [])
        self.head = head
        self.jackpot_value = jackpot
        self.history_error: Optional[Exception] = None
        self.history_calls = 0
        self.responses: Dict[str, object] = {}
        self.calls: List[tuple] = []
        self._queues: Dict[str, asyncio.Queue] = {}

    def _queue(self, topic: str) -> asyncio.Queue:
        if topic not in self._queues:
            self._queues[topic] = asyncio.Queue()
        return self._queues[topic]

    def push(self, item) -> None:
        """Deliver a record on its topic, or an exception/None on every topic."""
        if isinstance(item, EventRecord):
            self._queue(item.topic).put_nowait(item)
        else:
            for topic in TOPICS:
                self._queue(topic).put_nowait(item)

    def push_to(self, topic: str, item) -> None:
        self._queue(topic).put_nowait(item)

    async def jackpot(self) -> int:
        return self.jackpot_value

    async def block_number(self) -> int:
        return self.head

    async def all_events(self, from_block=0, to_block=None):
        self.history_calls += 1
        if self.history_error is not None:
            raise self.history_error
        selected = [
            e for e in self.events
            if e.block_number >= from_block and (to_block is None or e.block_number <= to_block)
        ]
        # Historical order is not emission order
        return list(reversed(selected))

    async def stream(self, topic, from_block, poll_interval):
        for record in sorted(self.events, key=lambda r: r.sort_key):
            if record.topic == topic and record.block_number >= from_block:
                yield record
        queue = self._queue(topic)
        while True:
            item = await queue.get()
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item

    async def _respond(self, method: str, *args) -> TxResult:
        self.calls.append((method,) + args)
        response = self.responses.get(method)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return TxResult(tx_hash="0x" + "11" * 32)
        return response

    async def play_solo_round(self, choice, stake, sender):
        return await self._respond("playSoloRound", choice, stake, sender)

    async def create_secret_round(self, commitment, stake, sender):
        return await self._respond("createSecretRound", commitment, stake, sender)

    async def join_secret_round(self, round_id, choice, stake, sender):
        return await self._respond("joinSecretRound", round_id, choice, stake, sender)

    async def reveal_choice(self, round_id, choice, secret, sender):
        return await self._respond("revealChoice", round_id, choice, secret, sender)


class FakeWallet:
    """WalletProvider with a settable account."""

    def __init__(self, account: Optional[str] = None):
        self.account = account
        self.error: Optional[Exception] = None

    async def get_active_account(self):
        if self.error is not None:
            raise self.error
        return self.account


class RecordingObserver(BaseViewObserver):
    """Records every notification as (name, args)."""

    def __init__(self):
        self.calls: List[tuple] = []

    def on_open_round_added(self, round):
        self.calls.append(("open_round_added", round.round_id))

    def on_round_resolved(self, round):
        self.calls.append(("round_resolved", round.round_id))

    def on_jackpot_changed(self, amount):
        self.calls.append(("jackpot_changed", amount))

    def on_account_changed(self, account):
        self.calls.append(("account_changed", account))

    def on_round_outcome(self, round_id, outcome):
        self.calls.append(("round_outcome", round_id, outcome))

    def on_snapshot(self, open_rounds, resolved_rounds):
        self.calls.append((
            "snapshot",
            [r.round_id for r in open_rounds],
            [r.round_id for r in resolved_rounds],
        ))

    def named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


async def wait_until(condition, timeout: float = 2.0) -> None:
    """Yield to the loop until ``condition()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


def ledger_error(method="getLogs", reason="connection reset", reverted=False):
    return LedgerCallError(method, reason, reverted=reverted)
