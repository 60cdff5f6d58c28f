"""
Insight Engine

Compares the current calendar month with the previous one and turns the
difference into statements: a spending trend, the top expense category
and a savings/deficit forecast.

Statements are data (kind + message + numeric payload). Rendering them is
up to the presentation layer.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pocketledger.ledger.aggregator import (
    ZERO,
    filter_by_month,
    previous_month,
    totals,
)
from pocketledger.models.ledger import LedgerSnapshot, ensure_aware, quantize_amount
from pocketledger.models.report import Insight, InsightKind, Totals


DEFAULT_TREND_THRESHOLD_PCT = Decimal("10")


def trend_percent(current_expense: Decimal, last_expense: Decimal) -> Decimal:
    """
    Month-over-month expense change in percent.

    A zero previous month is replaced by 1 to avoid dividing by zero.
    """
    base = last_expense if last_expense != 0 else Decimal("1")
    return (current_expense - last_expense) / base * 100


def monthly_totals(snapshot: LedgerSnapshot, now: datetime) -> tuple[Totals, Totals]:
    """(current month, previous month) totals over active transactions."""
    now = ensure_aware(now)
    tz = now.tzinfo
    last_year, last_month = previous_month(now.year, now.month)
    current = totals(filter_by_month(snapshot, now.year, now.month, tz))
    last = totals(filter_by_month(snapshot, last_year, last_month, tz))
    return current, last


def insights(
    snapshot: LedgerSnapshot,
    now: datetime,
    trend_threshold_pct: Decimal = DEFAULT_TREND_THRESHOLD_PCT,
) -> list[Insight]:
    current, last = monthly_totals(snapshot, now)
    threshold = Decimal(str(trend_threshold_pct))

    result = [_trend_insight(current.expense, last.expense, threshold)]

    top = _top_category(current)
    if top is not None:
        result.append(top)

    result.append(_forecast_insight(current, last))
    return result


def _trend_insight(
    current_expense: Decimal,
    last_expense: Decimal,
    threshold: Decimal,
) -> Insight:
    exact = trend_percent(current_expense, last_expense)
    pct = quantize_amount(exact)

    if exact > threshold:
        return Insight(
            kind=InsightKind.SURGE,
            message=f"Spending is up {pct:.1f}% compared to last month.",
            percent=pct,
        )
    if exact < -threshold:
        return Insight(
            kind=InsightKind.IMPROVEMENT,
            message=f"Spending is down {abs(pct):.1f}% compared to last month.",
            percent=abs(pct),
        )
    return Insight(
        kind=InsightKind.STABLE,
        message="Spending is stable compared to last month.",
        percent=pct,
    )


def _top_category(current: Totals) -> Optional[Insight]:
    """Largest expense tag this month; ties go to the alphabetically first tag."""
    if not current.expenses_by_tag:
        return None
    tag, amount = min(
        current.expenses_by_tag.items(),
        key=lambda item: (-item[1], item[0]),
    )
    return Insight(
        kind=InsightKind.TOP_CATEGORY,
        message=f"Top spending category this month: {tag} ({amount:.2f}).",
        amount=amount,
        tag=tag,
    )


def _forecast_insight(current: Totals, last: Totals) -> Insight:
    avg_expense = (current.expense + last.expense) / 2
    avg_income = (current.income + last.income) / 2
    forecast = quantize_amount(avg_income - avg_expense)

    if forecast > ZERO:
        return Insight(
            kind=InsightKind.FORECAST_SAVINGS,
            message=f"At this pace you could save about {forecast:.2f} next month.",
            amount=forecast,
        )
    if forecast == ZERO:
        message = "At this pace you will only break even next month."
    else:
        message = f"At this pace next month could end {abs(forecast):.2f} short."
    return Insight(
        kind=InsightKind.FORECAST_DEFICIT,
        message=message,
        amount=forecast,
    )
