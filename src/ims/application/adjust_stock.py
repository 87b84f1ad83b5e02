"""Application service: Adjust Stock use case.

Manual corrections after a physical count, damage or found stock.  A
reason is mandatory and is written to the ledger entry's notes.
"""

from __future__ import annotations

from decimal import Decimal

from ims.application.audit_sink import AuditSink
from ims.application.dto import AdjustmentResultDTO
from ims.domain.exceptions import ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.ledger import Reference, ReferenceType
from ims.domain.service.stock_movement_service import StockMovementService


class AdjustStockHandler:

    def __init__(self, stock: StockMovementService, audit: AuditSink) -> None:
        self._stock = stock
        self._audit = audit

    def handle(
        self,
        item_id: str,
        location_id: str,
        delta: Decimal | int | float | str,
        reason: str,
        actor: Actor,
        batch_id: str | None = None,
    ) -> AdjustmentResultDTO:
        if not reason or not reason.strip():
            raise ValidationError("A reason is required for stock adjustments")

        movement = self._stock.adjust(
            item_id=item_id,
            location_id=location_id,
            delta=delta,
            actor=actor,
            reference=Reference(ReferenceType.ADJUSTMENT),
            batch_id=batch_id,
            notes=reason.strip(),
        )
        result = AdjustmentResultDTO(
            batch_id=movement.batch.id,  # type: ignore[arg-type]
            adjustment=movement.entry.quantity,
            before_qty=movement.before_qty,
            after_qty=movement.batch.available_qty,
        )
        self._audit.record(
            actor,
            "STOCK_ADJUST",
            "item_batch",
            result.batch_id,
            {"available_qty": movement.before_qty},
            {"available_qty": result.after_qty, "reason": reason.strip()},
        )
        return result
