# Area: Chain
"""
rps_dapp._chain.lifecycle_client — Round lifecycle actions
==========================================================

Issues the four player actions against the ledger program on behalf of
the session's active account:

    play_solo            settle against the house in one transaction
    create_secret_round  commit a hidden move (keccak commitment) + stake
    join_secret_round    join an open round with a plaintext move + stake
    reveal_choice        disclose the creator's move and secret

Nothing here is retried. A failed submission raises ``TransactionRejected``
(or ``CommitmentMismatch`` for a reveal that does not open the stored
commitment); resubmitting a commit with a fresh secret would orphan the
player's own later reveal.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from pydantic import ValidationError

from ..errors import CommitmentMismatch, LedgerCallError, TransactionRejected
from ..types import (
    ROUND_CREATED,
    ROUND_RESOLVED,
    Choice,
    EventRecord,
    RoundCreatedArgs,
    RoundResolvedArgs,
    RoundOutcome,
    SecretRound,
    TxResult,
)
from .._sync.round_store import RoundStore
from .._sync.session import ClientSession
from .commitment import MIN_SECRET_LENGTH, commit, generate_secret

logger = logging.getLogger("rps_dapp.chain.lifecycle")

EventSink = Callable[[List[EventRecord]], Awaitable[None]]

# Revert reasons the ledger program uses when a reveal does not match
COMMITMENT_REVERT_MARKERS = ("commitment", "hash", "secret")


def _is_commitment_revert(error: LedgerCallError) -> bool:
    if not error.reverted:
        return False
    reason = error.reason.lower()
    return any(marker in reason for marker in COMMITMENT_REVERT_MARKERS)


class RoundLifecycleClient:
    """
    Submits round actions and hands receipt events to an optional sink.

    The sink (normally ``EventSynchronizer.ingest_local``) inserts the
    round optimistically; the later streamed copy of the same log is
    dropped by the event cursor.
    """

    def __init__(
        self,
        session: ClientSession,
        secret_length: int = MIN_SECRET_LENGTH,
        event_sink: Optional[EventSink] = None,
    ):
        self.session = session
        self.secret_length = secret_length
        self.event_sink = event_sink

    # ── Helpers ──────────────────────────────────────────────

    def _sender(self, action: str, round_id: Optional[int] = None) -> str:
        account = self.session.account
        if not account:
            raise TransactionRejected(action, "no active account", round_id=round_id)
        return account

    @staticmethod
    def _check_stake(action: str, stake: int, round_id: Optional[int] = None) -> int:
        if isinstance(stake, bool) or not isinstance(stake, int) or stake <= 0:
            raise TransactionRejected(
                action, f"stake must be a positive integer amount, got {stake!r}",
                round_id=round_id,
            )
        return stake

    async def _publish(self, events: Sequence[EventRecord]) -> None:
        if self.event_sink and events:
            await self.event_sink(list(events))

    # ── Actions ──────────────────────────────────────────────

    async def jackpot(self) -> int:
        return await self.session.ledger.jackpot()

    async def play_solo(self, choice: Union[Choice, int, str], stake: int) -> RoundOutcome:
        """Play against the house; the round resolves in the same transaction."""
        choice = Choice.parse(choice)
        stake = self._check_stake("playSoloRound", stake)
        sender = self._sender("playSoloRound")

        try:
            result = await self.session.ledger.play_solo_round(choice, stake, sender)
        except LedgerCallError as e:
            raise TransactionRejected("playSoloRound", e.reason) from e

        resolved = result.first(ROUND_RESOLVED)
        if resolved is None:
            raise TransactionRejected(
                "playSoloRound", "receipt carries no RoundResolved event",
                details={"tx_hash": result.tx_hash},
            )

        scratch = RoundStore()
        try:
            round_id = RoundResolvedArgs.model_validate(resolved.args).round_id
            for event in result.events:
                scratch.apply(event)
        except ValidationError as e:
            raise TransactionRejected(
                "playSoloRound", f"malformed event in receipt: {e}",
                details={"tx_hash": result.tx_hash},
            ) from e
        await self._publish(result.events)
        logger.info(f"Solo round {round_id} settled in tx {result.tx_hash}")
        return RoundOutcome(round=scratch.get(round_id), tx_hash=result.tx_hash)

    async def create_secret_round(
        self, choice: Union[Choice, int, str], stake: int
    ) -> SecretRound:
        """
        Commit a hidden move.

        The returned secret is the only copy; it must be handed to the
        player for the reveal. On failure no secret is returned.
        """
        choice = Choice.parse(choice)
        stake = self._check_stake("createSecretRound", stake)
        sender = self._sender("createSecretRound")

        secret = generate_secret(self.secret_length)
        commitment = commit(secret, choice)

        try:
            result = await self.session.ledger.create_secret_round(commitment, stake, sender)
        except LedgerCallError as e:
            raise TransactionRejected("createSecretRound", e.reason) from e

        round_id = self._created_round_id(result)
        await self._publish(result.events)
        logger.info(f"Secret round {round_id} created in tx {result.tx_hash}")
        return SecretRound(
            round_id=round_id,
            secret=secret,
            commitment="0x" + commitment.hex(),
            tx_hash=result.tx_hash,
        )

    @staticmethod
    def _created_round_id(result: TxResult) -> int:
        created = result.first(ROUND_CREATED)
        if created is None:
            raise TransactionRejected(
                "createSecretRound", "receipt carries no RoundCreated event",
                details={"tx_hash": result.tx_hash},
            )
        try:
            return RoundCreatedArgs.model_validate(created.args).round_id
        except ValidationError as e:
            raise TransactionRejected(
                "createSecretRound", f"malformed RoundCreated event: {e}",
                details={"tx_hash": result.tx_hash},
            ) from e

    async def join_secret_round(
        self, round_id: int, choice: Union[Choice, int, str], stake: int
    ) -> None:
        """Join an open round. The joiner's move is public on-chain."""
        choice = Choice.parse(choice)
        stake = self._check_stake("joinSecretRound", stake, round_id)
        sender = self._sender("joinSecretRound", round_id)

        try:
            result = await self.session.ledger.join_secret_round(round_id, choice, stake, sender)
        except LedgerCallError as e:
            raise TransactionRejected("joinSecretRound", e.reason, round_id=round_id) from e

        await self._publish(result.events)
        logger.info(f"Joined round {round_id} in tx {result.tx_hash}")

    async def reveal_choice(
        self, round_id: int, choice: Union[Choice, int, str], secret: str
    ) -> None:
        """Disclose the creator's move; the ledger program resolves the round."""
        choice = Choice.parse(choice)
        sender = self._sender("revealChoice", round_id)
        if not secret:
            raise TransactionRejected("revealChoice", "secret must not be empty", round_id=round_id)

        try:
            result = await self.session.ledger.reveal_choice(round_id, choice, secret, sender)
        except LedgerCallError as e:
            if _is_commitment_revert(e):
                raise CommitmentMismatch(round_id, e.reason) from e
            raise TransactionRejected("revealChoice", e.reason, round_id=round_id) from e

        await self._publish(result.events)
        logger.info(f"Revealed round {round_id} in tx {result.tx_hash}")
