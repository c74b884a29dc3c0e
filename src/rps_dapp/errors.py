# Area: Shared
"""
rps_dapp.errors — Custom exception classes
==========================================

Defines the exception hierarchy for ledger submissions and event
synchronization. Each exception stores full context for structured logging.
"""

from __future__ import annotations
from typing import Any, Dict, Optional

from .error_formatter import format_error_block


class RpsDappError(Exception):
    """Base exception for all rps_dapp errors."""
    pass


class LedgerCallError(RpsDappError):
    """
    Raised by a ledger adapter when a call, transaction or log query fails.

    ``reverted`` is True when the ledger program itself rejected the
    transaction, False for transport or signing failures.
    """

    def __init__(self, method: str, reason: str, reverted: bool = False):
        self.method = method
        self.reason = reason
        self.reverted = reverted
        super().__init__(f"{method}: {reason}")


class TransactionRejected(RpsDappError):
    """
    Raised when a ledger submission fails.

    Covers a declined signature, insufficient funds, a missing active
    account and contract-level reverts. Never retried: the caller must
    start a fresh action.
    """

    error_type = "TRANSACTION_REJECTED"

    def __init__(
        self,
        action: str,
        reason: str,
        round_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.action = action
        self.reason = reason
        self.round_id = round_id
        self.details = details or {}
        where = f" (round {round_id})" if round_id is not None else ""
        super().__init__(f"Transaction '{action}'{where} rejected: {reason}")

    def format_error_log(self) -> str:
        return format_error_block(
            error_type=self.error_type,
            action=self.action,
            round_id=self.round_id,
            reason=self.reason,
            details=self.details,
        )


class CommitmentMismatch(TransactionRejected):
    """
    Raised when a reveal is rejected because (secret, choice) does not
    hash to the stored commitment. Fatal for that round.
    """

    error_type = "COMMITMENT_MISMATCH"

    def __init__(self, round_id: int, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("revealChoice", reason, round_id=round_id, details=details)


class SubscriptionError(RpsDappError):
    """Raised when an event subscription transport drops."""

    error_type = "SUBSCRIPTION_ERROR"

    def __init__(self, topic: str, reason: str):
        self.topic = topic
        self.reason = reason
        super().__init__(f"Subscription to '{topic}' failed: {reason}")

    def format_error_log(self) -> str:
        return format_error_block(
            error_type=self.error_type,
            action=f"subscribe:{self.topic}",
            round_id=None,
            reason=self.reason,
            details=None,
        )


class StaleEpoch(RpsDappError):
    """
    Raised when a callback resumes after a resync invalidated its session.

    Callers drop the work silently; this never reaches the user.
    """

    def __init__(self, epoch: int, current_epoch: int):
        self.epoch = epoch
        self.current_epoch = current_epoch
        super().__init__(f"Epoch {epoch} is stale (current epoch is {current_epoch})")
