"""ConsumptionLog — theoretical vs actual usage recorded against a batch."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ims.domain.exceptions import ValidationError
from ims.domain.model.clock import utcnow
from ims.domain.model.value_objects import ZERO, to_decimal


@dataclass
class ConsumptionLog:
    id: str | None
    item_id: str
    batch_id: str
    department_id: str
    theoretical_qty: Decimal
    actual_qty: Decimal
    variance: Decimal
    consumed_by: str
    notes: str | None = None
    consumed_at: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        item_id: str,
        batch_id: str,
        department_id: str,
        theoretical_qty: str | int | float | Decimal,
        actual_qty: str | int | float | Decimal,
        consumed_by: str,
        notes: str | None = None,
    ) -> ConsumptionLog:
        theoretical = to_decimal(theoretical_qty, "Theoretical quantity")
        actual = to_decimal(actual_qty, "Actual quantity")
        if theoretical <= ZERO:
            raise ValidationError("Theoretical quantity must be positive")
        if actual < ZERO:
            raise ValidationError("Actual quantity cannot be negative")
        return ConsumptionLog(
            id=None,
            item_id=item_id,
            batch_id=batch_id,
            department_id=department_id,
            theoretical_qty=theoretical,
            actual_qty=actual,
            variance=theoretical - actual,
            consumed_by=consumed_by,
            notes=notes,
        )
