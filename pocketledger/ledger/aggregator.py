"""
Aggregator

Pure functions over a LedgerSnapshot: no mutation, no I/O.

Every report is built from *active* transactions only. Retired records
(reversed originals and their reversals) remain in the snapshot until the
retention sweep removes them, but they never count towards a figure.
"""

from datetime import datetime, timedelta, tzinfo
from decimal import Decimal
from typing import Iterable, Union

from pocketledger.models.ledger import (
    Goal,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    ensure_aware,
    quantize_amount,
)
from pocketledger.models.report import GoalProgress, Period, Totals
from pocketledger.validation import ValidationError


ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def active_transactions(snapshot: LedgerSnapshot) -> list[Transaction]:
    """Transactions not pending deletion, most recent first."""
    return sorted(
        (tx for tx in snapshot.transactions if tx.is_active),
        key=lambda tx: tx.date,
        reverse=True,
    )


def balance(snapshot: LedgerSnapshot) -> Decimal:
    """Active income minus active expense."""
    return sum((tx.signed_amount for tx in active_transactions(snapshot)), ZERO)


def totals(transactions: Iterable[Transaction]) -> Totals:
    """
    Sum income and expense over the given transactions.

    expenses_by_tag is keyed by the lower-cased tag; income never
    contributes to it.
    """
    income = ZERO
    expense = ZERO
    by_tag: dict[str, Decimal] = {}

    for tx in transactions:
        if tx.type is TransactionType.INCOME:
            income += tx.amount
        else:
            expense += tx.amount
            key = tx.tag.lower()
            by_tag[key] = by_tag.get(key, ZERO) + tx.amount

    return Totals(income=income, expense=expense, expenses_by_tag=by_tag)


def filter_by_period(
    snapshot: LedgerSnapshot,
    period: Union[Period, str],
    now: datetime,
) -> list[Transaction]:
    """
    Active transactions falling in a period relative to now.

    Calendar comparisons (daily/monthly/yearly) are made in now's timezone.
    weekly means the trailing 7 days: date >= now - 7 days.
    """
    try:
        period = Period(period)
    except ValueError:
        raise ValidationError.single(
            "period", "invalid_value",
            f"Unknown period {period!r}; expected one of {[p.value for p in Period]}",
        )

    now = ensure_aware(now)
    tz = now.tzinfo

    if period is Period.DAILY:
        today = now.date()
        return [
            tx for tx in active_transactions(snapshot)
            if tx.date.astimezone(tz).date() == today
        ]
    if period is Period.WEEKLY:
        week_ago = now - timedelta(days=7)
        return [tx for tx in active_transactions(snapshot) if tx.date >= week_ago]
    if period is Period.MONTHLY:
        return filter_by_month(snapshot, now.year, now.month, tz)
    return [
        tx for tx in active_transactions(snapshot)
        if tx.date.astimezone(tz).year == now.year
    ]


def filter_by_month(
    snapshot: LedgerSnapshot,
    year: int,
    month: int,
    tz: tzinfo,
) -> list[Transaction]:
    """Active transactions in a calendar month, as seen from tz."""
    result = []
    for tx in active_transactions(snapshot):
        local = tx.date.astimezone(tz)
        if local.year == year and local.month == month:
            result.append(tx)
    return result


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def goal_progress(snapshot: LedgerSnapshot, goal: Goal) -> GoalProgress:
    """
    Sum of active transactions tagged exactly with the goal's name.

    Every matching transaction counts as a positive contribution whatever
    its type. percent_complete is clamped at 100.
    """
    saved = sum(
        (tx.amount for tx in active_transactions(snapshot) if tx.tag == goal.name),
        ZERO,
    )
    percent = min(HUNDRED, saved * HUNDRED / goal.target_amount)
    return GoalProgress(
        goal=goal,
        saved=saved,
        percent_complete=quantize_amount(percent),
    )
