"""Item aggregate — a catalog entry that batches refer to.

Items are never physically removed; batches and ledger entries keep
pointing at them long after stock runs out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ims.domain.exceptions import ValidationError
from ims.domain.model.clock import utcnow
from ims.domain.model.value_objects import ZERO, to_decimal


@dataclass
class Item:
    id: str | None
    code: str
    name: str
    category: str
    unit: str
    min_stock: Decimal = ZERO
    reorder_level: Decimal = ZERO
    description: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        code: str,
        name: str,
        category: str,
        unit: str,
        min_stock: str | int | float | Decimal = 0,
        reorder_level: str | int | float | Decimal = 0,
        description: str | None = None,
    ) -> Item:
        for label, value in (("code", code), ("name", name), ("category", category), ("unit", unit)):
            if not value or not value.strip():
                raise ValidationError(f"Item {label} is required")

        min_qty = to_decimal(min_stock, "Minimum stock")
        reorder_qty = to_decimal(reorder_level, "Reorder level")
        if min_qty < ZERO or reorder_qty < ZERO:
            raise ValidationError("Stock thresholds cannot be negative")

        return Item(
            id=None,
            code=code.strip(),
            name=name.strip(),
            category=category.strip(),
            unit=unit.strip(),
            min_stock=min_qty,
            reorder_level=reorder_qty,
            description=description,
        )
