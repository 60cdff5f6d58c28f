"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of additions, reversals and purges
2. Debugging capability when the storage slot misbehaves

The audit logger:
- Is synchronous, like the rest of the ledger core
- Gracefully handles failures (logging never breaks a ledger operation)
"""

from collections import deque
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from pocketledger.models.audit import AuditEvent, AuditEventBuilder


DEFAULT_HISTORY_LIMIT = 500


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Events are written to the structured local log at their severity.
    The most recent events are also kept in `events` (oldest dropped
    first once history_limit is reached) so callers can show recent history.
    """

    def __init__(
        self,
        keep_history: bool = True,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._logger = structlog.get_logger("pocketledger.audit")
        self._keep_history = keep_history
        self.events: deque[AuditEvent] = deque(maxlen=history_limit)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the log write failed. Never raises.
        """
        if self._keep_history:
            self.events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    def log_transaction_added(
        self,
        transaction_id: UUID,
        transaction_type: str,
        amount: Decimal,
        tag: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            tag=tag,
        ))

    def log_goal_added(self, goal_id: UUID, name: str, target_amount: Decimal) -> None:
        self.log(AuditEventBuilder.goal_added(
            goal_id=goal_id,
            name=name,
            target_amount=target_amount,
        ))

    def log_contribution_added(
        self,
        transaction_id: UUID,
        goal_name: str,
        amount: Decimal,
    ) -> None:
        self.log(AuditEventBuilder.contribution_added(
            transaction_id=transaction_id,
            goal_name=goal_name,
            amount=amount,
        ))

    def log_transaction_reversed(
        self,
        original_id: UUID,
        reversal_id: UUID,
        delete_after: datetime,
    ) -> None:
        self.log(AuditEventBuilder.transaction_reversed(
            original_id=original_id,
            reversal_id=reversal_id,
            delete_after=delete_after,
        ))

    def log_reversal_cancelled(self, transaction_id: UUID) -> None:
        self.log(AuditEventBuilder.reversal_cancelled(transaction_id))

    def log_mutation_rejected(
        self,
        operation: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.mutation_rejected(
            operation=operation,
            error_message=error_message,
            details=details,
        ))

    def log_sweep_completed(self, purged_ids: list[UUID]) -> None:
        self.log(AuditEventBuilder.sweep_completed(purged_ids))

    def log_ledger_loaded(self, transaction_count: int, goal_count: int) -> None:
        self.log(AuditEventBuilder.ledger_loaded(transaction_count, goal_count))

    def log_persistence_failed(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.persistence_failed(operation, error_message))
