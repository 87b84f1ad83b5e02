"""Stock ledger — the append-only record of every quantity movement.

Entries are frozen; the only thing a repository ever does with one is
store it and hand it back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ims.domain.model.clock import utcnow


class TransactionType(Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"
    RETURN = "RETURN"
    CONSUMPTION = "CONSUMPTION"


class ReferenceType(Enum):
    GRN = "GRN"
    ISSUE = "ISSUE"
    RETURN = "RETURN"
    CONSUMPTION = "CONSUMPTION"
    ADJUSTMENT = "ADJUSTMENT"


@dataclass(frozen=True)
class Reference:
    """The document a movement was made for."""

    type: ReferenceType
    id: str | None = None


@dataclass(frozen=True)
class LedgerEntry:
    item_id: str
    transaction_type: TransactionType
    quantity: Decimal  # signed: positive adds stock, negative removes it
    unit_price: Decimal
    location_id: str
    user_id: str
    batch_id: str | None = None
    reference_id: str | None = None
    reference_type: ReferenceType | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    id: str | None = None


@dataclass(frozen=True)
class LedgerQuery:
    """Filter for ledger reads.  Unset fields match everything."""

    item_id: str | None = None
    batch_id: str | None = None
    transaction_type: TransactionType | None = None
    reference_type: ReferenceType | None = None
    reference_id: str | None = None
    location_id: str | None = None
    user_id: str | None = None
    since: datetime | None = None
    until: datetime | None = None

    def matches(self, entry: LedgerEntry) -> bool:
        checks = (
            (self.item_id, entry.item_id),
            (self.batch_id, entry.batch_id),
            (self.transaction_type, entry.transaction_type),
            (self.reference_type, entry.reference_type),
            (self.reference_id, entry.reference_id),
            (self.location_id, entry.location_id),
            (self.user_id, entry.user_id),
        )
        if any(wanted is not None and wanted != actual for wanted, actual in checks):
            return False
        if self.since is not None and entry.created_at < self.since:
            return False
        if self.until is not None and entry.created_at > self.until:
            return False
        return True
