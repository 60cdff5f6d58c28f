"""
Core Data Models for Pocket Ledger

These models define the strict schemas for the persisted ledger:
transactions, savings goals and the snapshot that holds both.
They are designed to:
1. Enforce the ledger invariants at construction time
2. Provide clear validation error messages
3. Serialize to the camelCase JSON blob kept in the storage slot

DESIGN DECISION: Models are frozen. Every ledger operation returns a new
snapshot built from copies, so a snapshot handed to a caller never changes
underneath it.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


TWO_PLACES = Decimal("0.01")

# Upper bound (exclusive) for any single money amount
MAX_AMOUNT = Decimal("1000000000000000")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_iso_instant(value: datetime) -> str:
    """Format as an ISO-8601 UTC instant, e.g. 2024-05-01T09:30:00.000Z."""
    utc = ensure_aware(value).astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_epoch_millis(value: datetime) -> int:
    return int(round(ensure_aware(value).timestamp() * 1000))


def from_epoch_millis(value: float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def quantize_amount(value: Decimal) -> Decimal:
    """
    Round a money amount to 2 decimal places (half up).

    Precision is widened to fit every integer digit, so large derived
    figures (sums, percentages) round instead of raising.
    """
    with localcontext() as ctx:
        if value.is_finite():
            ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _coerce_money(value: Any) -> Any:
    """
    Quantize numeric input before field validation.

    Anything that is not a finite number is passed through untouched so
    pydantic reports it with its own error message.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return value
    if not number.is_finite() or abs(number) >= MAX_AMOUNT:
        return value
    return quantize_amount(number)


_LEDGER_CONFIG = ConfigDict(
    frozen=True,
    str_strip_whitespace=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a money event."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def opposite(self) -> "TransactionType":
        if self is TransactionType.INCOME:
            return TransactionType.EXPENSE
        return TransactionType.INCOME


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense record.

    A transaction is either fully active (pending_delete=False,
    delete_after=None) or fully retired (pending_delete=True, delete_after
    set). Apart from those two fields nothing changes after creation.
    """
    model_config = _LEDGER_CONFIG

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        lt=MAX_AMOUNT,
        decimal_places=2,
        allow_inf_nan=False,
        description="Non-negative amount, 2 decimal places"
    )
    tag: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category label, or the goal name for contributions"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional free text"
    )
    date: datetime = Field(
        default_factory=utc_now,
        description="When the transaction was recorded"
    )

    # Reversal bookkeeping
    is_reversal: bool = Field(
        default=False,
        description="Synthesized by a reversal"
    )
    reversal_id: Optional[UUID] = Field(
        default=None,
        description="ID of the transaction this one reverses"
    )

    # Soft deletion
    pending_delete: bool = Field(
        default=False,
        description="Retired, awaiting purge"
    )
    delete_after: Optional[datetime] = Field(
        default=None,
        description="Purge-eligible once this instant has passed"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return _coerce_money(v)

    @field_validator('delete_after', mode='before')
    @classmethod
    def parse_epoch_millis(cls, v: Any) -> Any:
        """deleteAfter is stored as epoch milliseconds."""
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            try:
                return from_epoch_millis(float(v))
            except (OverflowError, OSError, ValueError):
                raise ValueError(f"deleteAfter is not a valid epoch timestamp: {v!r}")
        return v

    @field_validator('date', 'delete_after')
    @classmethod
    def make_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else None

    @model_validator(mode='after')
    def validate_retirement(self) -> 'Transaction':
        """Retirement fields must be set together."""
        if self.pending_delete != (self.delete_after is not None):
            raise ValueError(
                "pending_delete and delete_after must be set together"
            )
        if self.is_reversal and self.reversal_id is None:
            raise ValueError("A reversal must reference the transaction it reverses")
        return self

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> str:
        return f"{v:.2f}"

    @field_serializer('date', when_used='json')
    def serialize_date(self, v: datetime) -> str:
        return to_iso_instant(v)

    @field_serializer('delete_after', when_used='json')
    def serialize_delete_after(self, v: Optional[datetime]) -> Optional[int]:
        return to_epoch_millis(v) if v is not None else None

    @property
    def is_active(self) -> bool:
        return not self.pending_delete

    @property
    def signed_amount(self) -> Decimal:
        """+amount for income, -amount for expense."""
        if self.type is TransactionType.INCOME:
            return self.amount
        return -self.amount

    def retire(self, delete_after: datetime) -> 'Transaction':
        """Return a retired copy scheduled for purge at delete_after."""
        return self.model_copy(
            update={"pending_delete": True, "delete_after": ensure_aware(delete_after)}
        )


class Goal(BaseModel):
    """
    A savings goal.

    Contributions are linked by name: a transaction whose tag equals the
    goal name counts towards it. Renaming a goal would orphan its history,
    which is why goals have no rename operation.
    """
    model_config = _LEDGER_CONFIG

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique goal ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Goal name, matched against transaction tags"
    )
    target_amount: Decimal = Field(
        ...,
        gt=0,
        lt=MAX_AMOUNT,
        allow_inf_nan=False,
        description="Savings target"
    )
    monthly_target: Decimal = Field(
        ...,
        gt=0,
        lt=MAX_AMOUNT,
        allow_inf_nan=False,
        description="Informational monthly pacing target"
    )
    date_set: datetime = Field(
        default_factory=utc_now,
        description="When the goal was created"
    )

    @field_validator('target_amount', 'monthly_target', mode='before')
    @classmethod
    def coerce_targets(cls, v: Any) -> Any:
        return _coerce_money(v)

    @field_validator('date_set')
    @classmethod
    def make_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    @field_serializer('target_amount', 'monthly_target', when_used='json')
    def serialize_target(self, v: Decimal) -> Union[float, str]:
        """
        JSON number when a float holds the value exactly; otherwise the
        2-decimal string, which loads back the same way amounts do.
        """
        number = float(v)
        if Decimal(repr(number)) == v:
            return number
        return f"{v:.2f}"

    @field_serializer('date_set', when_used='json')
    def serialize_date_set(self, v: datetime) -> str:
        return to_iso_instant(v)


class LedgerSnapshot(BaseModel):
    """
    The full ledger: every transaction (active or retired) plus all goals.

    Snapshots are values. Mutating operations build and return a new one.
    """
    model_config = ConfigDict(frozen=True)

    transactions: tuple[Transaction, ...] = ()
    goals: tuple[Goal, ...] = ()

    def find_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        """Find a transaction by ID, active or retired."""
        for tx in self.transactions:
            if tx.id == transaction_id:
                return tx
        return None

    def find_goal(self, name: str) -> Optional[Goal]:
        """Find a goal by its exact name."""
        for goal in self.goals:
            if goal.name == name:
                return goal
        return None

    def to_blob(self) -> dict:
        """Wire representation kept in the storage slot."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem with caller-supplied input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'negative', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
