"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data flowing through the system must conform to these schemas.
"""

from pocketledger.models.ledger import (
    Goal,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    ValidationIssue,
)
from pocketledger.models.report import (
    Dashboard,
    GoalProgress,
    Insight,
    InsightKind,
    Period,
    Report,
    ReversalOutcome,
    Totals,
)
from pocketledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Goal",
    "LedgerSnapshot",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    # Derived models
    "Dashboard",
    "GoalProgress",
    "Insight",
    "InsightKind",
    "Period",
    "Report",
    "ReversalOutcome",
    "Totals",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
