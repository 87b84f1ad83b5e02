"""Allocation engine: which batches to draw from, and what stock is worth.

Issuance is always FIFO: batches are visited oldest-first and each one
gives ``min(remaining, available)`` until the request is covered.  The
valuation policies are read-only and never touch batch state.

Everything here is a pure function of the batches passed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable

from ims.domain.exceptions import InsufficientStockError, ValidationError
from ims.domain.model.batch import ItemBatch
from ims.domain.model.value_objects import ZERO


@dataclass(frozen=True)
class Allocation:
    """Draw *quantity* from one batch."""

    batch_id: str
    item_id: str
    location_id: str
    quantity: Decimal
    unit_price: Decimal


def _oldest_first(batches: Iterable[ItemBatch]) -> list[ItemBatch]:
    return sorted(batches, key=lambda b: b.created_at)


def allocate_fifo(
    batches: Iterable[ItemBatch],
    item_id: str,
    quantity: Decimal,
) -> list[Allocation]:
    """Plan a FIFO draw of *quantity* of *item_id*.

    Raises InsufficientStockError if the batches cannot cover the whole
    quantity.  The batches themselves are never modified.
    """
    if quantity <= ZERO:
        raise ValidationError("Issue quantity must be positive")

    eligible = [
        b for b in _oldest_first(batches) if b.item_id == item_id and b.available_qty > ZERO
    ]
    total_available = sum((b.available_qty for b in eligible), ZERO)
    if total_available < quantity:
        raise InsufficientStockError(
            f"Insufficient stock for item {item_id}. "
            f"Available: {total_available}, Requested: {quantity}"
        )

    allocations: list[Allocation] = []
    remaining = quantity
    for batch in eligible:
        if remaining <= ZERO:
            break
        take = min(remaining, batch.available_qty)
        allocations.append(
            Allocation(
                batch_id=batch.id,  # type: ignore[arg-type]
                item_id=item_id,
                location_id=batch.location_id,
                quantity=take,
                unit_price=batch.purchase_price,
            )
        )
        remaining -= take
    return allocations


# ---------------------------------------------------------------------------
# Valuation
# ---------------------------------------------------------------------------


class ValuationMethod(Enum):
    FIFO = "fifo"
    LIFO = "lifo"
    WEIGHTED_AVERAGE = "wa"

    @staticmethod
    def parse(value: str | ValuationMethod) -> ValuationMethod:
        if isinstance(value, ValuationMethod):
            return value
        try:
            return ValuationMethod(value.lower())
        except ValueError as exc:
            raise ValidationError(
                f"Unknown valuation method {value!r} (expected fifo, lifo or wa)"
            ) from exc


@dataclass(frozen=True)
class ValuationLine:
    item_id: str
    quantity: Decimal
    unit_price: Decimal
    total_value: Decimal
    batch_id: str | None = None
    batch_number: str | None = None


@dataclass(frozen=True)
class ValuationResult:
    method: ValuationMethod
    total_value: Decimal
    lines: list[ValuationLine]


def value_inventory(
    batches: Iterable[ItemBatch],
    method: ValuationMethod,
) -> ValuationResult:
    """Value on-hand stock under *method*.

    - FIFO: every batch with stock at its own purchase price, oldest first.
      These are the layers FIFO issuance leaves behind.
    - LIFO: per item, the on-hand quantity is laid against the received
      cost layers oldest-first, i.e. what the stock would be worth had
      issues drawn the newest receipts first.  Lines are listed newest
      layer first, the order LIFO issuance would draw them in.
    - Weighted average: per item, total value over total quantity.
    """
    ordered = _oldest_first(batches)
    if method is ValuationMethod.FIFO:
        lines = _fifo_lines(ordered)
    elif method is ValuationMethod.LIFO:
        lines = _lifo_lines(ordered)
    else:
        lines = _weighted_average_lines(ordered)
    total = sum((line.total_value for line in lines), ZERO)
    return ValuationResult(method=method, total_value=total, lines=lines)


def _fifo_lines(ordered: list[ItemBatch]) -> list[ValuationLine]:
    return [
        ValuationLine(
            item_id=b.item_id,
            quantity=b.available_qty,
            unit_price=b.purchase_price,
            total_value=b.stock_value,
            batch_id=b.id,
            batch_number=b.batch_number,
        )
        for b in ordered
        if b.available_qty > ZERO
    ]


def _lifo_lines(ordered: list[ItemBatch]) -> list[ValuationLine]:
    lines: list[ValuationLine] = []
    for item_id, layers in _group_by_item(ordered).items():
        item_lines: list[ValuationLine] = []
        remaining = sum((b.available_qty for b in layers), ZERO)
        for layer in layers:
            if remaining <= ZERO:
                break
            qty = min(remaining, layer.total_qty)
            if qty <= ZERO:
                continue
            item_lines.append(
                ValuationLine(
                    item_id=item_id,
                    quantity=qty,
                    unit_price=layer.purchase_price,
                    total_value=qty * layer.purchase_price,
                    batch_id=layer.id,
                    batch_number=layer.batch_number,
                )
            )
            remaining -= qty
        lines.extend(reversed(item_lines))
    return lines


def _weighted_average_lines(ordered: list[ItemBatch]) -> list[ValuationLine]:
    lines: list[ValuationLine] = []
    for item_id, group in _group_by_item(ordered).items():
        stocked = [b for b in group if b.available_qty > ZERO]
        total_qty = sum((b.available_qty for b in stocked), ZERO)
        if total_qty == ZERO:
            continue
        total_value = sum((b.stock_value for b in stocked), ZERO)
        avg_price = total_value / total_qty
        lines.append(
            ValuationLine(
                item_id=item_id,
                quantity=total_qty,
                unit_price=avg_price,
                total_value=total_value,
            )
        )
    return lines


def _group_by_item(ordered: list[ItemBatch]) -> dict[str, list[ItemBatch]]:
    groups: dict[str, list[ItemBatch]] = {}
    for batch in ordered:
        groups.setdefault(batch.item_id, []).append(batch)
    return groups
