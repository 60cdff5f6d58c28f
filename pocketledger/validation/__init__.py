"""Input validation package."""

from pocketledger.validation.validator import (
    ValidationError,
    clean_description,
    parse_amount,
    require_label,
)

__all__ = ["ValidationError", "clean_description", "parse_amount", "require_label"]
