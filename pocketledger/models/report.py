"""
Derived Data Models

Everything the presentation layer renders is one of these models.
They are computed from a LedgerSnapshot and never persisted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from pocketledger.models.ledger import Goal, Transaction, to_iso_instant


class Period(str, Enum):
    """Reporting windows, all relative to 'now'."""
    DAILY = "daily"      # same calendar date
    WEEKLY = "weekly"    # trailing 7 days
    MONTHLY = "monthly"  # same calendar month
    YEARLY = "yearly"    # same calendar year


class Totals(BaseModel):
    """Income/expense sums over a set of transactions."""

    income: Decimal = Field(default=Decimal("0.00"))
    expense: Decimal = Field(default=Decimal("0.00"))
    expenses_by_tag: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Expense sums keyed by lower-cased tag"
    )

    @computed_field
    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class GoalProgress(BaseModel):
    """How far a goal has been funded."""

    goal: Goal
    saved: Decimal = Field(ge=0)
    percent_complete: Decimal = Field(
        ge=0,
        le=100,
        description="Clamped at 100 even when saved exceeds the target"
    )


class InsightKind(str, Enum):
    SURGE = "surge"
    IMPROVEMENT = "improvement"
    STABLE = "stable"
    TOP_CATEGORY = "top-category"
    FORECAST_SAVINGS = "forecast-savings"
    FORECAST_DEFICIT = "forecast-deficit"


class Insight(BaseModel):
    """
    A single statement about the ledger.

    The numeric payload is carried alongside the message so the
    presentation layer can format it without re-deriving anything.
    """

    kind: InsightKind
    message: str
    percent: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    tag: Optional[str] = None


class Dashboard(BaseModel):
    """Everything the main screen shows."""

    generated_at: datetime
    balance: Decimal
    totals: Totals = Field(description="Current month totals")
    goals: list[GoalProgress] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)


class Report(BaseModel):
    """Active transactions in a period, with their totals."""

    period: Period
    generated_at: datetime
    transactions: list[Transaction] = Field(default_factory=list)
    totals: Totals

    def to_csv_rows(self) -> list[list[str]]:
        """Return rows suitable for CSV export, header first."""
        rows = [["Date", "Type", "Tag", "Description", "Amount"]]
        for tx in self.transactions:
            rows.append([
                to_iso_instant(tx.date),
                tx.type.value,
                tx.tag,
                tx.description or "",
                f"{tx.amount:.2f}",
            ])
        return rows


class ReversalOutcome(BaseModel):
    """Result of an interactive reversal."""

    transaction_id: UUID
    confirmed: bool
    reversal: Optional[Transaction] = None

    @property
    def cancelled(self) -> bool:
        return not self.confirmed
