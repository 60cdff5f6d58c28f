"""
Input Validation

DESIGN DECISION: Everything a caller passes into a ledger mutation is
checked here before any new snapshot is built. A rejected mutation leaves
the ledger untouched.

IMPORTANT: Validation NEVER silently fixes input beyond rounding money to
2 decimal places. Negative, NaN or non-numeric amounts are rejected, not
clamped.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pocketledger.errors import LedgerError
from pocketledger.models.ledger import MAX_AMOUNT, ValidationIssue, quantize_amount


class ValidationError(LedgerError, ValueError):
    """Caller input was rejected before mutation."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])


def parse_amount(
    value: Any,
    field: str = "amount",
    allow_zero: bool = True,
) -> Decimal:
    """
    Convert caller input to a money Decimal with 2 decimal places.

    Accepts Decimal, int, float and numeric strings.

    Raises:
        ValidationError: non-numeric, NaN/infinite, negative, too large, or zero
            when allow_zero is False
    """
    if value is None or isinstance(value, bool):
        raise ValidationError.single(field, "not_numeric", f"{field} must be a number")

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError.single(
                field, "not_numeric", f"{field} must be a number, got {value!r}"
            )
    else:
        raise ValidationError.single(
            field, "not_numeric", f"{field} must be a number, got {type(value).__name__}"
        )

    if not number.is_finite():
        raise ValidationError.single(field, "not_finite", f"{field} must be a finite number")
    if number < 0:
        raise ValidationError.single(field, "negative", f"{field} cannot be negative")

    if number < MAX_AMOUNT:
        number = quantize_amount(abs(number))
    if number >= MAX_AMOUNT:
        raise ValidationError.single(
            field, "too_large", f"{field} must be less than {MAX_AMOUNT:,}"
        )
    if not allow_zero and number == 0:
        raise ValidationError.single(field, "not_positive", f"{field} must be greater than zero")
    return number


def require_label(value: Optional[str], field: str, max_length: int = 100) -> str:
    """Strip a label and reject it if empty or too long."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError.single(field, "missing", f"{field} is required")
    label = value.strip()
    if len(label) > max_length:
        raise ValidationError.single(
            field, "too_long", f"{field} must be at most {max_length} characters"
        )
    return label


def clean_description(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """Blank descriptions become None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError.single("description", "invalid_type", "description must be text")
    text = value.strip()
    if len(text) > max_length:
        raise ValidationError.single(
            "description", "too_long", f"description must be at most {max_length} characters"
        )
    return text or None
