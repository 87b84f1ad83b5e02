"""Data Transfer Objects — plain containers that cross layer boundaries.

Input specs carry what the caller asked for; output DTOs carry results
back out without exposing domain internals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from ims.domain.exceptions import DomainException


@dataclass(frozen=True)
class RequisitionItemSpec:
    item_id: str
    quantity: Decimal | int | float | str
    unit: str = ""
    purpose: str = ""
    priority: str = "medium"


@dataclass(frozen=True)
class PurchaseOrderItemSpec:
    item_id: str
    quantity: Decimal | int | float | str
    unit_price: Decimal | int | float | str
    unit: str = ""


@dataclass(frozen=True)
class GrnItemSpec:
    """Input: one received batch of an item."""

    item_id: str
    batch_number: str
    quantity: Decimal | int | float | str
    unit_price: Decimal | int | float | str
    location_id: str
    expiry_date: date | None = None


@dataclass(frozen=True)
class IssueItemSpec:
    item_id: str
    quantity: Decimal | int | float | str
    unit: str = ""


@dataclass(frozen=True)
class ReturnItemSpec:
    item_id: str
    batch_id: str
    quantity: Decimal | int | float | str
    unit: str = ""


@dataclass(frozen=True)
class LedgerLineDTO:
    """Output: one ledger entry as displayed to the user."""

    entry_id: str
    item_id: str
    batch_id: str | None
    transaction_type: str
    quantity: Decimal
    unit_price: Decimal
    location_id: str
    reference: str
    created_at: str


@dataclass(frozen=True)
class AdjustmentResultDTO:
    batch_id: str
    adjustment: Decimal
    before_qty: Decimal
    after_qty: Decimal


@dataclass(frozen=True)
class StockBatchDTO:
    batch_id: str
    batch_number: str
    location_id: str
    total_qty: Decimal
    available_qty: Decimal
    purchase_price: Decimal
    expiry_date: date | None


@dataclass(frozen=True)
class StockLineDTO:
    """Output: stock held for one item, summed over its batches."""

    item_id: str
    item_code: str
    item_name: str
    category: str
    unit: str
    total_qty: Decimal
    available_qty: Decimal
    batches: list[StockBatchDTO] = field(default_factory=list)


@dataclass(frozen=True)
class ErrorResult:
    """Structured failure handed to the outer layer: a kind and a message."""

    kind: str
    message: str

    @staticmethod
    def from_exception(exc: DomainException) -> ErrorResult:
        return ErrorResult(kind=exc.kind, message=str(exc))
