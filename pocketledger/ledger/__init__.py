"""
Ledger core: pure functions over LedgerSnapshot values.

    sweeper     drop retired transactions whose grace period expired
    aggregator  balance, totals, period filters, goal progress
    mutator     add transactions/goals/contributions, reverse transactions
    insights    month-over-month trend, top category, forecast
"""

from pocketledger.ledger.aggregator import (
    active_transactions,
    balance,
    filter_by_month,
    filter_by_period,
    goal_progress,
    previous_month,
    totals,
)
from pocketledger.ledger.insights import insights, monthly_totals, trend_percent
from pocketledger.ledger.mutator import (
    add_contribution,
    add_goal,
    add_transaction,
    get_transaction,
    reversal_tag,
    reverse_transaction,
)
from pocketledger.ledger.sweeper import GRACE_PERIOD, SweepResult, is_expired, sweep

__all__ = [
    # Aggregator
    "active_transactions",
    "balance",
    "filter_by_month",
    "filter_by_period",
    "goal_progress",
    "previous_month",
    "totals",
    # Insights
    "insights",
    "monthly_totals",
    "trend_percent",
    # Mutator
    "add_contribution",
    "add_goal",
    "add_transaction",
    "get_transaction",
    "reversal_tag",
    "reverse_transaction",
    # Sweeper
    "GRACE_PERIOD",
    "SweepResult",
    "is_expired",
    "sweep",
]
