"""
Ledger Store

Owns the persisted representation of the ledger: one JSON blob holding
every transaction and goal, written to a single key-value slot.

DESIGN DECISION: Persistence problems never reach the caller.
- A missing, unreadable or malformed blob loads as an empty ledger
- A failed save is logged and reported as False; the in-memory snapshot
  stays authoritative until the next successful save

Individual records that fail validation are skipped (and counted in the
log) rather than discarding an otherwise readable ledger.
"""

import json
from decimal import Decimal
from typing import Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from pocketledger.audit import AuditLogger
from pocketledger.models.ledger import Goal, LedgerSnapshot, Transaction
from pocketledger.services.storage.interface import KeyValueSlot, StorageError


logger = structlog.get_logger(__name__)

DEFAULT_SLOT_KEY = "finance-ledger"

RecordT = TypeVar("RecordT", bound=BaseModel)


class LedgerStore:
    """
    Loads and saves LedgerSnapshots through a KeyValueSlot.
    """

    def __init__(
        self,
        slot: KeyValueSlot,
        key: str = DEFAULT_SLOT_KEY,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._slot = slot
        self._key = key
        self._audit_logger = audit_logger

    @property
    def key(self) -> str:
        return self._key

    @property
    def archive_key(self) -> str:
        return f"{self._key}.archive"

    def load(self) -> LedgerSnapshot:
        """
        Read the persisted ledger.

        Returns an empty snapshot if the slot is empty or its contents
        cannot be understood. Never raises.
        """
        try:
            raw = self._slot.read(self._key)
        except StorageError as e:
            self._report_failure("load", str(e))
            return LedgerSnapshot()

        if raw is None:
            logger.info("ledger_slot_empty", key=self._key)
            return LedgerSnapshot()

        try:
            blob = json.loads(raw, parse_float=Decimal)
        except json.JSONDecodeError as e:
            self._report_failure("load", f"Malformed ledger JSON: {e}")
            return LedgerSnapshot()

        if not isinstance(blob, dict):
            self._report_failure("load", "Ledger blob is not a JSON object")
            return LedgerSnapshot()

        raw_transactions = blob.get("transactions") or []
        raw_goals = blob.get("goals") or []
        if not isinstance(raw_transactions, list) or not isinstance(raw_goals, list):
            self._report_failure("load", "Ledger blob has non-list sections")
            return LedgerSnapshot()

        snapshot = LedgerSnapshot(
            transactions=tuple(self._parse_records(raw_transactions, Transaction)),
            goals=tuple(self._parse_records(raw_goals, Goal)),
        )

        if self._audit_logger:
            self._audit_logger.log_ledger_loaded(
                transaction_count=len(snapshot.transactions),
                goal_count=len(snapshot.goals),
            )
        return snapshot

    def save(self, snapshot: LedgerSnapshot) -> bool:
        """
        Overwrite the persisted ledger with the whole snapshot.

        Returns True on success. Failures are logged, not raised.
        """
        data = json.dumps(snapshot.to_blob())
        try:
            self._slot.write(self._key, data)
        except StorageError as e:
            self._report_failure("save", str(e))
            return False

        logger.debug(
            "ledger_saved",
            key=self._key,
            transactions=len(snapshot.transactions),
            goals=len(snapshot.goals),
        )
        return True

    def archive(self, transactions: Iterable[Transaction]) -> bool:
        """
        Append purged transactions to the archive slot.

        Returns True on success (or when there is nothing to archive).
        """
        records = [
            tx.model_dump(mode="json", by_alias=True) for tx in transactions
        ]
        if not records:
            return True

        try:
            raw = self._slot.read(self.archive_key)
        except StorageError as e:
            self._report_failure("archive", str(e))
            return False

        existing = []
        if raw:
            try:
                existing = json.loads(raw)
            except json.JSONDecodeError:
                existing = None
            if not isinstance(existing, list):
                logger.warning("ledger_archive_malformed", key=self.archive_key)
                existing = []

        try:
            self._slot.write(self.archive_key, json.dumps(existing + records))
        except StorageError as e:
            self._report_failure("archive", str(e))
            return False

        logger.info("ledger_archived", key=self.archive_key, count=len(records))
        return True

    def _parse_records(
        self,
        raw_records: list,
        model: type[RecordT],
    ) -> list[RecordT]:
        """Validate raw dicts into models, skipping the malformed ones."""
        parsed = []
        skipped = 0
        for raw in raw_records:
            try:
                parsed.append(model.model_validate(raw))
            except SchemaError:
                skipped += 1
        if skipped:
            logger.warning(
                "ledger_records_skipped",
                key=self._key,
                record_type=model.__name__,
                skipped=skipped,
            )
        return parsed

    def _report_failure(self, operation: str, message: str) -> None:
        logger.error("ledger_persistence_failed", key=self._key, operation=operation, error=message)
        if self._audit_logger:
            self._audit_logger.log_persistence_failed(operation, message)
