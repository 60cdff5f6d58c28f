"""
Audit Models for Pocket Ledger

Every change to the ledger is logged for audit purposes.
This provides:
1. Traceability of who-did-what to the money log
2. Debugging information when persistence fails
3. A record of what the retention sweep purged

DESIGN DECISION: Audit events are append-only log records. They are never
stored in the ledger blob itself.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from pocketledger.models.ledger import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    GOAL_ADDED = "goal_added"
    CONTRIBUTION_ADDED = "contribution_added"
    TRANSACTION_REVERSED = "transaction_reversed"
    REVERSAL_CANCELLED = "reversal_cancelled"
    MUTATION_REJECTED = "mutation_rejected"

    # Retention
    SWEEP_COMPLETED = "sweep_completed"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    PERSISTENCE_FAILED = "persistence_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every ledger mutation creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="'transaction', 'goal' or 'ledger'"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(tx_id, "expense", amount, "food")
        event = AuditEventBuilder.sweep_completed(purged_ids)
    """

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
        tag: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{transaction_type.capitalize()} recorded: {tag} {amount:.2f}",
            details={
                "type": transaction_type,
                "amount": f"{amount:.2f}",
                "tag": tag,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_added(
        goal_id: UUID,
        name: str,
        target_amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_ADDED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Goal set: {name} ({target_amount:.2f})",
            details={
                "name": name,
                "target_amount": f"{target_amount:.2f}",
            },
            is_user_action=True,
        )

    @staticmethod
    def contribution_added(
        transaction_id: UUID,
        goal_name: str,
        amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Contribution to {goal_name}: {amount:.2f}",
            details={
                "goal_name": goal_name,
                "amount": f"{amount:.2f}",
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_reversed(
        original_id: UUID,
        reversal_id: UUID,
        delete_after: datetime,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REVERSED,
            entity_type="transaction",
            entity_id=original_id,
            description="Transaction reversed; both records retired",
            details={
                "reversal_id": str(reversal_id),
                "delete_after": delete_after.isoformat(),
            },
            is_user_action=True,
        )

    @staticmethod
    def reversal_cancelled(transaction_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REVERSAL_CANCELLED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="User declined the reversal",
            is_user_action=True,
        )

    @staticmethod
    def mutation_rejected(
        operation: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            description=f"Rejected {operation}",
            error_message=error_message,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def sweep_completed(purged_ids: list[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SWEEP_COMPLETED,
            entity_type="ledger",
            description=f"Retention sweep purged {len(purged_ids)} transactions",
            details={
                "purged_ids": [str(tx_id) for tx_id in purged_ids],
            },
        )

    @staticmethod
    def ledger_loaded(transaction_count: int, goal_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            description=f"Ledger loaded: {transaction_count} transactions, {goal_count} goals",
            details={
                "transaction_count": transaction_count,
                "goal_count": goal_count,
            },
        )

    @staticmethod
    def persistence_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description=f"Ledger {operation} failed",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )
