"""
Main Orchestrator for Pocket Ledger

This module ties the functional ledger core to storage and audit logging
and is the interface the presentation layer talks to.

Flows:
1. Open (load → sweep expired retirements → write back if anything was purged)
2. Mutate (validate → new snapshot → persist → audit)
3. Reverse (look up → await user confirmation → reverse → persist → audit)
4. Derive (dashboard and period reports, computed on request)

DESIGN DECISION: The ledger core works on immutable snapshots. LedgerService
is the thin stateful wrapper that holds the current snapshot and persists it
wholesale after every mutation. A failed save is logged by the store and the
service carries on with its in-memory snapshot.
"""

import inspect
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Awaitable, Callable, Iterator, Optional, Union
from uuid import UUID

from pocketledger import ledger
from pocketledger.audit import AuditLogger
from pocketledger.config import AppSettings, Settings, get_settings
from pocketledger.errors import LedgerError, UserCancelled
from pocketledger.models.ledger import (
    Goal,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    utc_now,
)
from pocketledger.models.report import (
    Dashboard,
    Period,
    Report,
    ReversalOutcome,
)
from pocketledger.services.storage import FileSlot, LedgerStore


Clock = Callable[[], datetime]
ConfirmCallback = Callable[[Transaction], Union[bool, Awaitable[bool]]]


class LedgerService:
    """
    Owns the current ledger snapshot for a single running process.

    Every mutating method returns the record it created; every derived
    view is computed fresh from the current snapshot.
    """

    def __init__(
        self,
        store: LedgerStore,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
        archive_purged: bool = False,
    ):
        self._store = store
        self._settings = settings or AppSettings()
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock or utc_now
        self._archive_purged = archive_purged
        self._snapshot = LedgerSnapshot()

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    def get_snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    # =========================================================================
    # LOAD
    # =========================================================================

    def open(self) -> LedgerSnapshot:
        """
        Load the persisted ledger and purge expired retirements.

        If the sweep removed anything the reduced ledger is written back
        immediately (after archiving the purged records, when enabled).
        """
        loaded = self._store.load()
        result = ledger.sweep(loaded, self._clock())

        if result.changed:
            if self._archive_purged:
                self._store.archive(result.purged)
            self._audit_logger.log_sweep_completed([tx.id for tx in result.purged])
            self._store.save(result.snapshot)

        self._snapshot = result.snapshot
        return self._snapshot

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_transaction(
        self,
        type: Union[TransactionType, str],
        amount: Any,
        tag: str,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Transaction:
        """
        Record income or an expense.

        Raises:
            ValidationError: the input was rejected; nothing changed
        """
        with self._rejections("add_transaction"):
            snapshot, tx = ledger.add_transaction(
                self._snapshot, type, amount, tag, description, now or self._clock()
            )
        self._commit(snapshot)
        self._audit_logger.log_transaction_added(
            transaction_id=tx.id,
            transaction_type=tx.type.value,
            amount=tx.amount,
            tag=tx.tag,
        )
        return tx

    def add_goal(
        self,
        name: str,
        target_amount: Any,
        monthly_target: Any,
        now: Optional[datetime] = None,
    ) -> Goal:
        """
        Set up a savings goal.

        Raises:
            ValidationError: empty/duplicate name or non-positive targets
        """
        with self._rejections("add_goal"):
            snapshot, goal = ledger.add_goal(
                self._snapshot, name, target_amount, monthly_target, now or self._clock()
            )
        self._commit(snapshot)
        self._audit_logger.log_goal_added(goal.id, goal.name, goal.target_amount)
        return goal

    def add_contribution(
        self,
        goal_name: str,
        amount: Any,
        now: Optional[datetime] = None,
    ) -> Transaction:
        """
        Put money towards a goal (recorded as an expense tagged with its name).

        Raises:
            NotFoundError: no goal has this name
            ValidationError: the amount was rejected
        """
        with self._rejections("add_contribution"):
            snapshot, tx = ledger.add_contribution(
                self._snapshot, goal_name, amount, now or self._clock()
            )
        self._commit(snapshot)
        self._audit_logger.log_contribution_added(tx.id, tx.tag, tx.amount)
        return tx

    async def reverse_transaction(
        self,
        transaction_id: Union[UUID, str],
        confirm: ConfirmCallback,
        now: Optional[datetime] = None,
    ) -> ReversalOutcome:
        """
        Reverse a transaction after the user confirms.

        `confirm` receives the transaction about to be reversed and returns
        (or resolves to) True to proceed. Returning False or raising
        UserCancelled abandons the reversal with no state change.

        Raises:
            NotFoundError: unknown ID; raised before the user is asked
        """
        with self._rejections("reverse_transaction"):
            original = ledger.get_transaction(self._snapshot, transaction_id)

        try:
            answer = confirm(original)
            if inspect.isawaitable(answer):
                answer = await answer
        except UserCancelled:
            answer = False

        if not answer:
            self._audit_logger.log_reversal_cancelled(original.id)
            return ReversalOutcome(transaction_id=original.id, confirmed=False)

        with self._rejections("reverse_transaction"):
            snapshot, reversal = ledger.reverse_transaction(
                self._snapshot,
                original.id,
                now or self._clock(),
                self._settings.grace_period,
            )
        self._commit(snapshot)
        self._audit_logger.log_transaction_reversed(
            original_id=original.id,
            reversal_id=reversal.id,
            delete_after=reversal.delete_after,
        )
        return ReversalOutcome(
            transaction_id=original.id,
            confirmed=True,
            reversal=reversal,
        )

    # =========================================================================
    # DERIVED VIEWS
    # =========================================================================

    def compute_dashboard(self, now: Optional[datetime] = None) -> Dashboard:
        """Balance, this month's totals, goal progress, insights and recent activity."""
        now = now or self._clock()
        snapshot = self._snapshot
        current, _ = ledger.monthly_totals(snapshot, now)
        limit = self._settings.recent_transactions_limit

        return Dashboard(
            generated_at=now,
            balance=ledger.balance(snapshot),
            totals=current,
            goals=[ledger.goal_progress(snapshot, goal) for goal in snapshot.goals],
            insights=ledger.insights(
                snapshot,
                now,
                Decimal(str(self._settings.trend_threshold_pct)),
            ),
            recent_transactions=ledger.active_transactions(snapshot)[:limit],
        )

    def compute_report(
        self,
        period: Union[Period, str],
        now: Optional[datetime] = None,
    ) -> Report:
        """
        Active transactions in a period, with their totals.

        Raises:
            ValidationError: unknown period
        """
        now = now or self._clock()
        transactions = ledger.filter_by_period(self._snapshot, period, now)
        return Report(
            period=Period(period),
            generated_at=now,
            transactions=transactions,
            totals=ledger.totals(transactions),
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _commit(self, snapshot: LedgerSnapshot) -> bool:
        """Adopt a new snapshot and persist it. The store logs save failures."""
        self._snapshot = snapshot
        return self._store.save(snapshot)

    @contextmanager
    def _rejections(self, operation: str) -> Iterator[None]:
        """Audit LedgerErrors raised inside the block, then re-raise them."""
        try:
            yield
        except LedgerError as e:
            self._audit_logger.log_mutation_rejected(
                operation=operation,
                error_message=str(e),
                details={"error_type": type(e).__name__},
            )
            raise


def create_ledger_service(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
) -> LedgerService:
    """
    Factory function wiring a file-backed LedgerService and opening it.

    Args:
        settings: Root settings; defaults to get_settings()
        clock: Source of 'now'; defaults to the current UTC time

    Returns:
        An opened LedgerService
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    app_settings = settings.app
    audit_logger = AuditLogger(history_limit=app_settings.audit_history_limit)

    store = LedgerStore(
        FileSlot(storage_settings.data_dir),
        key=storage_settings.slot_key,
        audit_logger=audit_logger,
    )
    service = LedgerService(
        store,
        settings=app_settings,
        audit_logger=audit_logger,
        clock=clock,
        archive_purged=storage_settings.archive_purged,
    )
    service.open()
    return service
