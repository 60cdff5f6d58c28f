"""
Tests for Pocket Ledger

Test strategy:
1. Unit tests for individual components (models, validation, ledger core)
2. Integration tests for flows (LedgerService over in-memory slots)
3. No real user data in tests (MemorySlot or tmp_path only)
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from pocketledger.audit import AuditLogger
from pocketledger.models.ledger import (
    Goal,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    quantize_amount,
    to_epoch_millis,
)
from pocketledger.models.report import Period, Report, Totals
from pocketledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_defaults_to_active(self):
        """A new transaction is active and not a reversal."""
        tx = Transaction(type=TransactionType.EXPENSE, amount="12.5", tag="food", date=NOW)
        assert tx.amount == Decimal("12.50")
        assert tx.is_active is True
        assert tx.pending_delete is False
        assert tx.delete_after is None
        assert tx.is_reversal is False
        assert tx.reversal_id is None

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the tag."""
        tx = Transaction(type="income", amount=1, tag="  salary  ", date=NOW)
        assert tx.tag == "salary"

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(type="expense", amount=Decimal("-100"), tag="food")

    def test_transaction_rejects_nan_amount(self):
        """NaN never makes it into the ledger."""
        with pytest.raises(ValueError):
            Transaction(type="expense", amount="NaN", tag="food")

    def test_transaction_rejects_empty_tag(self):
        with pytest.raises(ValueError):
            Transaction(type="expense", amount=1, tag="   ")

    def test_retirement_fields_must_be_set_together(self):
        """pending_delete without delete_after is not a valid state."""
        with pytest.raises(ValueError, match="must be set together"):
            Transaction(type="expense", amount=1, tag="food", pending_delete=True)
        with pytest.raises(ValueError, match="must be set together"):
            Transaction(type="expense", amount=1, tag="food", delete_after=NOW)

    def test_reversal_must_reference_original(self):
        with pytest.raises(ValueError, match="must reference"):
            Transaction(type="income", amount=1, tag="x", is_reversal=True)

    def test_naive_dates_are_utc(self):
        tx = Transaction(type="income", amount=1, tag="x", date=datetime(2024, 1, 1, 9, 0))
        assert tx.date.tzinfo == timezone.utc

    def test_transaction_is_frozen(self):
        tx = Transaction(type="income", amount=1, tag="x", date=NOW)
        with pytest.raises(ValueError):
            tx.amount = Decimal("2.00")

    def test_retire_returns_retired_copy(self):
        """retire() leaves the original untouched."""
        tx = Transaction(type="expense", amount=5, tag="food", date=NOW)
        retired = tx.retire(NOW + timedelta(hours=48))
        assert retired.pending_delete is True
        assert retired.delete_after == NOW + timedelta(hours=48)
        assert retired.id == tx.id
        assert retired.amount == tx.amount
        assert tx.pending_delete is False

    def test_signed_amount(self):
        income = Transaction(type="income", amount=10, tag="salary", date=NOW)
        expense = Transaction(type="expense", amount=4, tag="food", date=NOW)
        assert income.signed_amount == Decimal("10.00")
        assert expense.signed_amount == Decimal("-4.00")

    def test_opposite_type(self):
        assert TransactionType.INCOME.opposite is TransactionType.EXPENSE
        assert TransactionType.EXPENSE.opposite is TransactionType.INCOME

    def test_transaction_rejects_amount_beyond_limit(self):
        with pytest.raises(ValueError):
            Transaction(type="expense", amount="1e25", tag="food")

    def test_unrepresentable_delete_after_is_a_validation_error(self):
        """Out-of-range epoch values fail validation like any other bad field."""
        with pytest.raises(ValueError, match="not a valid epoch timestamp"):
            Transaction.model_validate({
                "type": "expense", "amount": "1", "tag": "food",
                "pendingDelete": True, "deleteAfter": float("inf"),
            })

    def test_quantize_large_derived_values(self):
        """Sums and percentages far above any single amount still round."""
        assert quantize_amount(Decimal("1E+27")) == Decimal("1E+27")
        assert quantize_amount(Decimal("123456789012345678901234567.125")) == Decimal(
            "123456789012345678901234567.13"
        )


class TestGoalModel:
    """Tests for the Goal model."""

    def test_goal_creation(self):
        goal = Goal(name="Trip", target_amount=500, monthly_target=50, date_set=NOW)
        assert goal.name == "Trip"
        assert goal.target_amount == Decimal("500.00")

    def test_goal_rejects_non_positive_target(self):
        with pytest.raises(ValueError):
            Goal(name="Trip", target_amount=0, monthly_target=50)
        with pytest.raises(ValueError):
            Goal(name="Trip", target_amount=100, monthly_target=-1)


class TestLedgerBlob:
    """Tests for the persisted wire format."""

    def _snapshot(self) -> LedgerSnapshot:
        active = Transaction(type="income", amount="1000", tag="salary", date=NOW)
        retired = Transaction(
            type="expense", amount="50", tag="rent", date=NOW,
        ).retire(NOW + timedelta(hours=48))
        goal = Goal(name="Trip", target_amount=500, monthly_target=50, date_set=NOW)
        return LedgerSnapshot(transactions=(active, retired), goals=(goal,))

    def test_blob_uses_camel_case_keys(self):
        blob = self._snapshot().to_blob()
        tx = blob["transactions"][0]
        assert set(tx) == {
            "id", "type", "amount", "tag", "description", "date",
            "isReversal", "reversalId", "pendingDelete", "deleteAfter",
        }
        assert set(blob["goals"][0]) == {
            "id", "name", "targetAmount", "monthlyTarget", "dateSet",
        }

    def test_blob_value_formats(self):
        """Amounts are 2-decimal strings, dates ISO instants, deleteAfter epoch ms."""
        blob = self._snapshot().to_blob()
        active, retired = blob["transactions"]
        assert active["amount"] == "1000.00"
        assert active["date"] == "2024-05-15T12:00:00.000Z"
        assert active["deleteAfter"] is None
        assert retired["deleteAfter"] == to_epoch_millis(NOW + timedelta(hours=48))
        assert blob["goals"][0]["targetAmount"] == 500.0
        assert blob["goals"][0]["dateSet"] == "2024-05-15T12:00:00.000Z"

    def test_goal_target_beyond_float_precision_is_written_exactly(self):
        goal = Goal(
            name="House", target_amount="999999999999999.99", monthly_target=100, date_set=NOW
        )
        record = LedgerSnapshot(goals=(goal,)).to_blob()["goals"][0]
        assert record["targetAmount"] == "999999999999999.99"
        assert record["monthlyTarget"] == 100.0

    def test_blob_loads_back(self):
        snapshot = self._snapshot()
        assert LedgerSnapshot.model_validate(snapshot.to_blob()) == snapshot

    def test_find_helpers(self):
        snapshot = self._snapshot()
        tx = snapshot.transactions[1]
        assert snapshot.find_transaction(tx.id) == tx
        assert snapshot.find_transaction(uuid4()) is None
        assert snapshot.find_goal("Trip").name == "Trip"
        assert snapshot.find_goal("trip") is None


class TestReportModels:
    """Tests for derived models."""

    def test_totals_net(self):
        totals = Totals(income=Decimal("1000"), expense=Decimal("200"))
        assert totals.net == Decimal("800")

    def test_report_csv_rows(self):
        tx = Transaction(type="expense", amount="9.5", tag="food", description="lunch", date=NOW)
        report = Report(
            period=Period.DAILY,
            generated_at=NOW,
            transactions=[tx],
            totals=Totals(expense=Decimal("9.50")),
        )
        rows = report.to_csv_rows()
        assert rows[0] == ["Date", "Type", "Tag", "Description", "Amount"]
        assert rows[1] == ["2024-05-15T12:00:00.000Z", "expense", "food", "lunch", "9.50"]


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Expense recorded",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.transaction_added(
            transaction_id=uuid4(),
            transaction_type="expense",
            amount=Decimal("12.50"),
            tag="food",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["details"]["amount"] == "12.50"
        assert log_dict["is_user_action"] is True

    def test_audit_event_builder_sweep_completed(self):
        purged = [uuid4(), uuid4()]
        event = AuditEventBuilder.sweep_completed(purged)
        assert event.event_type == AuditEventType.SWEEP_COMPLETED
        assert event.details["purged_ids"] == [str(p) for p in purged]
        assert event.is_user_action is False

    def test_audit_event_builder_persistence_failed(self):
        event = AuditEventBuilder.persistence_failed("save", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"



class TestAuditLogger:
    """Tests for the in-memory audit history."""

    def test_history_is_bounded(self):
        audit_logger = AuditLogger(history_limit=3)
        ids = [uuid4() for _ in range(5)]
        for tx_id in ids:
            audit_logger.log_reversal_cancelled(tx_id)

        assert len(audit_logger.events) == 3
        assert [e.entity_id for e in audit_logger.events] == ids[2:]

    def test_history_can_be_disabled(self):
        audit_logger = AuditLogger(keep_history=False)
        assert audit_logger.log(AuditEventBuilder.ledger_loaded(1, 0)) is True
        assert len(audit_logger.events) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
