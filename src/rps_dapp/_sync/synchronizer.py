# Area: Sync
"""
rps_dapp._sync.synchronizer — Event synchronizer
================================================

Keeps the RoundStore in step with the ledger program's ``RoundCreated``
and ``RoundResolved`` events and turns every change into view-model
notifications.

A session runs in one epoch:

1. all topic subscriptions enter SUBSCRIBING
2. historical replay up to the current head block rebuilds the store and
   primes the cursor
3. all subscriptions enter STREAMING; each topic is streamed from the head
   block and every record goes through ``ingest``

A transport failure on any topic ends the session (ERROR), waits
``reconnect_delay`` and starts a new session with a fresh full replay
rather than trusting partial state. ``resync`` (account change) starts a
new epoch at once, cancels the running session and rebuilds from scratch.
Any replay or delivery that resumes under an older epoch is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Optional

from pydantic import ValidationError

from .._shared import log_error
from ..errors import LedgerCallError, StaleEpoch, SubscriptionError
from ..types import ROUND_CREATED, ROUND_RESOLVED, TOPICS, EventRecord
from .enums import SyncEvent, SyncState
from .event_cursor import EventCursor
from .notifier import ViewNotifier, outcome_for
from .round_store import DEFAULT_HISTORY_WINDOW, RoundStore
from .session import ClientSession
from .state_machine import SubscriptionStateMachine

logger = logging.getLogger("rps_dapp.sync.synchronizer")


class EventSynchronizer:
    """
    Ingests ledger events into a RoundStore, exactly once per log.

    Usage:
        sync = EventSynchronizer(session, notifier=notifier)
        await sync.start()
        ...
        await sync.resync(new_account)
        ...
        await sync.stop()
    """

    def __init__(
        self,
        session: ClientSession,
        store: Optional[RoundStore] = None,
        cursor: Optional[EventCursor] = None,
        notifier: Optional[ViewNotifier] = None,
        from_block: int = 0,
        poll_interval: float = 1.0,
        reconnect_delay: float = 2.0,
        history_window: int = DEFAULT_HISTORY_WINDOW,
    ):
        self.session = session
        self.store = store if store is not None else RoundStore()
        self.cursor = cursor if cursor is not None else EventCursor()
        self.notifier = notifier if notifier is not None else ViewNotifier()
        self.from_block = from_block
        self.poll_interval = poll_interval
        self.reconnect_delay = reconnect_delay
        self.history_window = history_window
        self.states: Dict[str, SubscriptionStateMachine] = {
            topic: SubscriptionStateMachine(topic) for topic in TOPICS
        }
        self._task: Optional[asyncio.Task] = None

    # ── Lifecycle ────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_streaming(self) -> bool:
        return all(sm.is_streaming for sm in self.states.values())

    async def start(self) -> None:
        """Start the session loop in the background. No-op if running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_sessions())

    async def stop(self) -> None:
        """Cancel the running session and invalidate its epoch."""
        self.session.begin_epoch()
        await self._cancel_task()
        self._transition_all(SyncEvent.STOP)
        logger.info("Synchronizer stopped")

    async def resync(self, account: Optional[str]) -> None:
        """
        Full resynchronization for a new active account.

        Starts a new epoch, discards cursor and store, and restarts the
        session (which replays all history again).
        """
        epoch = self.session.begin_epoch()
        self.session.switch_account(account)
        self.notifier.account_changed(account)
        await self._cancel_task()
        self.cursor.reset()
        self.store.clear()
        logger.info(f"Resync for {account} (epoch {epoch})", extra={"epoch": epoch})
        self._task = asyncio.create_task(self._run_sessions())

    async def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _transition_all(self, event: SyncEvent, reason: Optional[str] = None) -> None:
        for sm in self.states.values():
            if sm.can_transition(event):
                sm.transition(event, reason)

    def _enter_subscribing(self) -> None:
        for sm in self.states.values():
            if sm.current_state == SyncState.IDLE:
                sm.transition(SyncEvent.SUBSCRIBE)
            elif sm.current_state == SyncState.ERROR:
                sm.transition(SyncEvent.RETRY)
            else:
                sm.transition(SyncEvent.RESYNC)

    async def _run_sessions(self) -> None:
        while True:
            epoch = self.session.begin_epoch()
            try:
                finished = await self._session(epoch)
            except SubscriptionError as e:
                log_error(e)
                self._transition_all(SyncEvent.TRANSPORT_ERROR, e.reason)
            except Exception as e:
                logger.error(f"Session error: {e}", exc_info=True)
                self._transition_all(SyncEvent.TRANSPORT_ERROR, str(e))
            else:
                if finished:
                    logger.info("Event streams closed")
                    self._transition_all(SyncEvent.STOP)
                    return
                continue
            logger.info(f"Reconnecting in {self.reconnect_delay}s")
            await asyncio.sleep(self.reconnect_delay)

    async def _session(self, epoch: int) -> bool:
        """
        One subscription session.

        Returns:
            True if every stream ended, False if the session went stale
        """
        self._enter_subscribing()
        head = await self.replay_history(epoch)
        if head is None:
            return False
        self._transition_all(SyncEvent.REPLAY_COMPLETE)

        tasks = [
            asyncio.create_task(self._stream_topic(topic, head, epoch))
            for topic in TOPICS
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in done:
            error = task.exception()
            if error is not None:
                raise error
        return self.session.is_current(epoch)

    # ── Replay ───────────────────────────────────────────────

    async def replay_history(self, epoch: int) -> Optional[int]:
        """
        Rebuild the store from ``all_events(from_block)`` up to the head.

        Returns:
            The head block the replay covers, or None if the epoch went
            stale while fetching (the store is left untouched)

        Raises:
            SubscriptionError: If the historical fetch fails
        """
        ledger = self.session.ledger
        try:
            head = await ledger.block_number()
            events = await ledger.all_events(self.from_block, head)
            jackpot = await ledger.jackpot()
        except LedgerCallError as e:
            raise SubscriptionError("history", e.reason) from e

        try:
            self.session.ensure_current(epoch)
        except StaleEpoch as e:
            logger.debug(f"Replay dropped: {e}", extra={"epoch": epoch})
            return None

        self.cursor.reset()
        self.store.replay(events)
        self.cursor.mark_all(events)

        self.notifier.snapshot(
            self.store.list_open(), self.store.list_resolved(self.history_window)
        )
        self.notifier.jackpot_changed(jackpot)
        return head

    # ── Live delivery ────────────────────────────────────────

    async def _stream_topic(self, topic: str, from_block: int, epoch: int) -> None:
        try:
            async for record in self.session.ledger.stream(topic, from_block, self.poll_interval):
                if not self.session.is_current(epoch):
                    return
                await self.ingest(record, epoch)
        except LedgerCallError as e:
            raise SubscriptionError(topic, e.reason) from e

    async def ingest(self, record: EventRecord, epoch: int) -> bool:
        """
        Apply one delivered record and notify observers.

        Returns:
            True if the record was applied, False if it was stale, a
            duplicate or malformed
        """
        try:
            self.session.ensure_current(epoch)
        except StaleEpoch as e:
            logger.debug(
                f"{record.topic} at {record.log_id} dropped: {e}",
                extra={"epoch": epoch, "topic": record.topic},
            )
            return False
        if not self.cursor.should_apply(record):
            return False

        try:
            changed = self.store.apply(record)
        except ValidationError as e:
            logger.warning(f"Malformed {record.topic} at {record.log_id}: {e}")
            return False

        if changed is None:
            return True

        if record.topic == ROUND_CREATED:
            self.notifier.open_round_added(changed)
        elif record.topic == ROUND_RESOLVED:
            self.notifier.round_resolved(changed)
            outcome = outcome_for(changed, self.session.account)
            if outcome is not None:
                self.notifier.round_outcome(changed.round_id, outcome)
            await self._refresh_jackpot(epoch)
        return True

    async def ingest_local(self, records: Iterable[EventRecord]) -> int:
        """
        Optimistically apply events decoded from a local transaction receipt.

        The streamed copy of the same log is later dropped by the cursor.

        Returns:
            Number of records applied
        """
        epoch = self.session.epoch
        applied = 0
        for record in sorted(records, key=lambda r: r.sort_key):
            if await self.ingest(record, epoch):
                applied += 1
        return applied

    async def _refresh_jackpot(self, epoch: int) -> None:
        try:
            amount = await self.session.ledger.jackpot()
        except LedgerCallError as e:
            logger.warning(f"Jackpot refresh failed: {e}")
            return
        if self.session.is_current(epoch):
            self.notifier.jackpot_changed(amount)
