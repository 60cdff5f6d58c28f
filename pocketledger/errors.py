"""Exceptions shared across the ledger core."""


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class NotFoundError(LedgerError):
    """The referenced transaction or goal does not exist."""

    def __init__(self, entity_type: str, key: object):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"{entity_type.capitalize()} not found: {key}")


class UserCancelled(LedgerError):
    """
    The user declined a confirmation prompt.

    Not a failure: the operation is simply abandoned with no state change.
    """
    pass
