"""
Retention Sweeper

Retired transactions (reversed originals and their reversals) stay in the
ledger for a grace period so they can still be inspected. Once their
delete_after instant has passed, the sweep removes them for good.

The sweep runs once per load, before any other computation. The caller is
responsible for persisting the reduced snapshot when anything was purged.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict

from pocketledger.models.ledger import LedgerSnapshot, Transaction, ensure_aware


GRACE_PERIOD = timedelta(hours=48)


class SweepResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    snapshot: LedgerSnapshot
    purged: tuple[Transaction, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.purged)


def is_expired(tx: Transaction, now: datetime) -> bool:
    """Retired and past its delete_after instant (strictly)."""
    return (
        tx.pending_delete
        and tx.delete_after is not None
        and tx.delete_after < ensure_aware(now)
    )


def sweep(snapshot: LedgerSnapshot, now: datetime) -> SweepResult:
    """Remove every expired retired transaction. Goals are never touched."""
    kept = []
    purged = []
    for tx in snapshot.transactions:
        if is_expired(tx, now):
            purged.append(tx)
        else:
            kept.append(tx)

    if not purged:
        return SweepResult(snapshot=snapshot)

    return SweepResult(
        snapshot=snapshot.model_copy(update={"transactions": tuple(kept)}),
        purged=tuple(purged),
    )
