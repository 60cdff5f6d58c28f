"""
Ledger Mutator

Every way the ledger can change. Each function takes a snapshot and
returns a new snapshot together with the record it created; the input
snapshot is never modified. Input is validated before anything is built,
so a rejected call has no effect.

Reversal is the only way to take a transaction back. It appends an
opposite-direction copy and retires *both* records, so the original stops
counting immediately while the pair stays inspectable until the retention
sweep purges it.
"""

from datetime import datetime, timedelta
from typing import Any, Optional, Union
from uuid import UUID

from pocketledger.errors import NotFoundError
from pocketledger.ledger.sweeper import GRACE_PERIOD
from pocketledger.models.ledger import (
    Goal,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    ensure_aware,
)
from pocketledger.validation import (
    ValidationError,
    clean_description,
    parse_amount,
    require_label,
)


REVERSAL_TAG_PREFIX = "Reversal of "


def reversal_tag(original_tag: str) -> str:
    """Tag given to the reversal of a transaction tagged original_tag."""
    return f"{REVERSAL_TAG_PREFIX}{original_tag}"[:100]


def add_transaction(
    snapshot: LedgerSnapshot,
    type: Union[TransactionType, str],
    amount: Any,
    tag: str,
    description: Optional[str],
    now: datetime,
) -> tuple[LedgerSnapshot, Transaction]:
    """
    Append a new active transaction.

    Raises:
        ValidationError: unknown type, empty tag, negative/NaN/non-numeric amount
    """
    try:
        tx_type = TransactionType(type)
    except ValueError:
        raise ValidationError.single(
            "type", "invalid_value", f"type must be 'income' or 'expense', got {type!r}"
        )

    tx = Transaction(
        type=tx_type,
        amount=parse_amount(amount),
        tag=require_label(tag, "tag"),
        description=clean_description(description),
        date=ensure_aware(now),
    )
    return _append_transaction(snapshot, tx), tx


def add_goal(
    snapshot: LedgerSnapshot,
    name: str,
    target_amount: Any,
    monthly_target: Any,
    now: datetime,
) -> tuple[LedgerSnapshot, Goal]:
    """
    Append a new savings goal.

    Goal names are matched against transaction tags, so they must be
    unique; the comparison ignores case.

    Raises:
        ValidationError: empty or duplicate name, non-positive targets
    """
    name = require_label(name, "name")
    target = parse_amount(target_amount, "target_amount", allow_zero=False)
    monthly = parse_amount(monthly_target, "monthly_target", allow_zero=False)

    if any(goal.name.lower() == name.lower() for goal in snapshot.goals):
        raise ValidationError.single(
            "name", "duplicate", f"A goal named {name!r} already exists"
        )

    goal = Goal(
        name=name,
        target_amount=target,
        monthly_target=monthly,
        date_set=ensure_aware(now),
    )
    new_snapshot = snapshot.model_copy(update={"goals": snapshot.goals + (goal,)})
    return new_snapshot, goal


def add_contribution(
    snapshot: LedgerSnapshot,
    goal_name: str,
    amount: Any,
    now: datetime,
) -> tuple[LedgerSnapshot, Transaction]:
    """
    Set money aside for a goal.

    Recorded as an expense tagged with the goal name, so it also lowers
    the balance by the contributed amount.

    Raises:
        NotFoundError: no goal with that exact name
        ValidationError: non-positive or non-numeric amount
    """
    goal_name = require_label(goal_name, "goal_name")
    value = parse_amount(amount, allow_zero=False)
    goal = snapshot.find_goal(goal_name)
    if goal is None:
        raise NotFoundError("goal", goal_name)

    return add_transaction(
        snapshot,
        TransactionType.EXPENSE,
        value,
        goal.name,
        f"Contribution to {goal.name}",
        now,
    )


def reverse_transaction(
    snapshot: LedgerSnapshot,
    transaction_id: Union[UUID, str],
    now: datetime,
    grace_period: timedelta = GRACE_PERIOD,
) -> tuple[LedgerSnapshot, Transaction]:
    """
    Undo a transaction by pairing it with its opposite.

    The reversal copies the original's amount with the opposite type and
    references it through reversal_id. Both the original and the reversal
    are retired with delete_after = now + grace_period. Retired originals
    can be reversed again; their purge time moves to the new deadline.

    Raises:
        NotFoundError: no transaction (active or retired) has this ID
    """
    original = get_transaction(snapshot, transaction_id)

    now = ensure_aware(now)
    delete_after = now + grace_period

    reversal = Transaction(
        type=original.type.opposite,
        amount=original.amount,
        tag=reversal_tag(original.tag),
        description=f"Reversal of transaction {original.id}",
        date=now,
        is_reversal=True,
        reversal_id=original.id,
    ).retire(delete_after)

    transactions = tuple(
        tx.retire(delete_after) if tx.id == original.id else tx
        for tx in snapshot.transactions
    ) + (reversal,)

    return snapshot.model_copy(update={"transactions": transactions}), reversal


def get_transaction(
    snapshot: LedgerSnapshot,
    transaction_id: Union[UUID, str],
) -> Transaction:
    """
    Look up a transaction, active or retired.

    Raises:
        NotFoundError: no transaction has this ID
    """
    tx_id = _as_uuid(transaction_id)
    original = snapshot.find_transaction(tx_id) if tx_id else None
    if original is None:
        raise NotFoundError("transaction", transaction_id)
    return original


def _append_transaction(snapshot: LedgerSnapshot, tx: Transaction) -> LedgerSnapshot:
    return snapshot.model_copy(
        update={"transactions": snapshot.transactions + (tx,)}
    )


def _as_uuid(value: Union[UUID, str]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None
