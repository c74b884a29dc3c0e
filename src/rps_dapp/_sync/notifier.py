# Area: Sync
"""
rps_dapp._sync.notifier — View-model notifications
==================================================

Pushes view-model deltas to registered observers (the renderer). The
notifier knows nothing about how rounds are drawn.
"""

import logging
from typing import List, Optional, Protocol, Sequence

from ..types import Outcome, Round, same_address

logger = logging.getLogger("rps_dapp.sync.notifier")


class ViewObserver(Protocol):
    """Protocol for renderers of the round view."""

    def on_open_round_added(self, round: Round) -> None: ...

    def on_round_resolved(self, round: Round) -> None: ...

    def on_jackpot_changed(self, amount: int) -> None: ...

    def on_account_changed(self, account: Optional[str]) -> None: ...

    def on_round_outcome(self, round_id: int, outcome: Outcome) -> None: ...

    def on_snapshot(self, open_rounds: Sequence[Round], resolved_rounds: Sequence[Round]) -> None: ...


class BaseViewObserver:
    """
    No-op observer. Subclass and override only the notifications you need.
    """

    def on_open_round_added(self, round: Round) -> None:
        pass

    def on_round_resolved(self, round: Round) -> None:
        pass

    def on_jackpot_changed(self, amount: int) -> None:
        pass

    def on_account_changed(self, account: Optional[str]) -> None:
        pass

    def on_round_outcome(self, round_id: int, outcome: Outcome) -> None:
        pass

    def on_snapshot(self, open_rounds: Sequence[Round], resolved_rounds: Sequence[Round]) -> None:
        pass


def outcome_for(round: Round, account: Optional[str]) -> Optional[Outcome]:
    """
    Outcome of a resolved round for ``account``.

    Returns:
        None if the round is unresolved or the account did not play in it
    """
    if round.winner is None or not round.involves(account):
        return None
    if round.is_draw:
        return Outcome.DRAW
    if same_address(round.winner, account):
        return Outcome.WIN
    return Outcome.LOSE


class ViewNotifier:
    """
    Dispatches view-model notifications to observers.

    An observer that raises is logged and skipped; the others still run.

    Usage:
        notifier = ViewNotifier()
        notifier.register(renderer)
        notifier.open_round_added(round)
    """

    def __init__(self):
        self._observers: List[ViewObserver] = []

    def register(self, observer: ViewObserver) -> None:
        self._observers.append(observer)
        logger.debug(f"Registered observer {type(observer).__name__}")

    def unregister(self, observer: ViewObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _dispatch(self, name: str, *args) -> None:
        for observer in list(self._observers):
            handler = getattr(observer, name, None)
            if handler is None:
                continue
            try:
                handler(*args)
            except Exception as e:
                logger.error(
                    f"Observer {type(observer).__name__}.{name} failed: {e}",
                    exc_info=True,
                )

    def open_round_added(self, round: Round) -> None:
        self._dispatch("on_open_round_added", round)

    def round_resolved(self, round: Round) -> None:
        self._dispatch("on_round_resolved", round)

    def jackpot_changed(self, amount: int) -> None:
        self._dispatch("on_jackpot_changed", amount)

    def account_changed(self, account: Optional[str]) -> None:
        self._dispatch("on_account_changed", account)

    def round_outcome(self, round_id: int, outcome: Outcome) -> None:
        self._dispatch("on_round_outcome", round_id, outcome)

    def snapshot(self, open_rounds: Sequence[Round], resolved_rounds: Sequence[Round]) -> None:
        self._dispatch("on_snapshot", open_rounds, resolved_rounds)
