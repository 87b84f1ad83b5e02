"""Application service: Record Consumption use case.

A department reports how much of a batch it expected to use and how much
it actually used.  Only the actual quantity leaves stock; the difference
is kept on the log as the variance.
"""

from __future__ import annotations

from decimal import Decimal

from ims.application.audit_sink import AuditSink
from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.consumption import ConsumptionLog
from ims.domain.model.ledger import Reference, ReferenceType
from ims.domain.model.value_objects import ZERO
from ims.domain.repository.batch_repository import BatchRepository
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.service.stock_movement_service import StockMovement, StockMovementService


class RecordConsumptionHandler:

    def __init__(
        self,
        consumption_repo: DocumentRepository[ConsumptionLog],
        batch_repo: BatchRepository,
        stock: StockMovementService,
        audit: AuditSink,
    ) -> None:
        self._consumption_repo = consumption_repo
        self._batch_repo = batch_repo
        self._stock = stock
        self._audit = audit

    def handle(
        self,
        batch_id: str,
        theoretical_qty: Decimal | int | float | str,
        actual_qty: Decimal | int | float | str,
        actor: Actor,
        department_id: str = "",
        notes: str | None = None,
        item_id: str | None = None,
    ) -> ConsumptionLog:
        batch = self._batch_repo.get_by_id(batch_id)
        if batch is None:
            raise EntityNotFoundError(f"Batch not found: {batch_id}")
        if item_id is not None and item_id != batch.item_id:
            raise ValidationError(f"Batch {batch.batch_number} does not hold item {item_id}")

        with self._consumption_repo.locked():
            log = ConsumptionLog.create(
                item_id=batch.item_id,
                batch_id=batch_id,
                department_id=department_id,
                theoretical_qty=theoretical_qty,
                actual_qty=actual_qty,
                consumed_by=actor.user_id,
                notes=notes,
            )
            log.id = self._consumption_repo.next_id()

            reference = Reference(ReferenceType.CONSUMPTION, log.id)
            movements: list[StockMovement] = []
            # Nothing physically left the batch, so there is nothing to move
            if log.actual_qty > ZERO:
                movements.append(
                    self._stock.consume(
                        batch_id,
                        log.actual_qty,
                        actor=actor,
                        reference=reference,
                        notes=notes or f"Consumption (variance {log.variance})",
                    )
                )

            try:
                self._consumption_repo.save(log)
            except Exception:
                self._stock.reverse(movements, actor=actor, reference=reference)
                raise

        self._audit.record(actor, "CONSUME", "consumption_log", log.id, after=log)
        return log
