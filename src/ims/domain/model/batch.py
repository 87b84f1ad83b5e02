"""ItemBatch — a physically received lot of one item at one location.

A batch is created by a goods receipt and afterwards only ever moves by
a signed delta on its available quantity.  Fully depleted batches stay
as historical records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from ims.domain.exceptions import InsufficientStockError, ValidationError
from ims.domain.model.clock import utcnow
from ims.domain.model.value_objects import ZERO, Quantity, to_decimal


@dataclass
class ItemBatch:
    """Per-batch quantity state.

    Invariants:
    - ``0 <= available_qty <= total_qty``
    - ``total_qty`` only moves together with ``available_qty`` (returns and
      adjustments); issues and consumption leave it untouched.
    """

    id: str | None
    item_id: str
    batch_number: str
    location_id: str
    purchase_price: Decimal
    total_qty: Decimal
    available_qty: Decimal
    grn_id: str | None = None
    expiry_date: date | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def receive(
        item_id: str,
        batch_number: str,
        location_id: str,
        purchase_price: str | float | int | Decimal,
        quantity: str | float | int | Decimal,
        expiry_date: date | None = None,
        grn_id: str | None = None,
    ) -> ItemBatch:
        """Open a new batch holding everything that was received."""
        if not batch_number or not batch_number.strip():
            raise ValidationError("Batch number is required")
        if not location_id:
            raise ValidationError("Location is required for a batch")

        qty = Quantity.of(quantity).value
        price = to_decimal(purchase_price, "Purchase price")
        if price < ZERO:
            raise ValidationError("Purchase price cannot be negative")

        now = utcnow()
        return ItemBatch(
            id=None,
            item_id=item_id,
            batch_number=batch_number.strip(),
            location_id=location_id,
            purchase_price=price,
            total_qty=qty,
            available_qty=qty,
            grn_id=grn_id,
            expiry_date=expiry_date,
            created_at=now,
            updated_at=now,
        )

    # --- Mutation -------------------------------------------------------------

    def apply_delta(self, delta: Decimal, *, affects_total: bool = False) -> Decimal:
        """Move the available quantity by *delta* and return the new value.

        Raises InsufficientStockError if a negative delta would drive the
        available quantity below zero.  Nothing changes on failure.
        """
        new_available = self.available_qty + delta
        if new_available < ZERO:
            raise InsufficientStockError(
                f"Insufficient stock in batch {self.batch_number} "
                f"(need {-delta}, have {self.available_qty} available)"
            )
        new_total = self.total_qty + delta if affects_total else self.total_qty
        if new_available > new_total:
            raise ValidationError(
                f"Batch {self.batch_number} cannot hold more than its total "
                f"quantity ({new_available} > {new_total})"
            )
        self.available_qty = new_available
        self.total_qty = new_total
        self.updated_at = utcnow()
        return new_available

    # --- Computed properties --------------------------------------------------

    @property
    def is_depleted(self) -> bool:
        return self.available_qty == ZERO

    @property
    def stock_value(self) -> Decimal:
        return self.available_qty * self.purchase_price

    def is_expired(self, on: date) -> bool:
        return self.expiry_date is not None and self.expiry_date < on
