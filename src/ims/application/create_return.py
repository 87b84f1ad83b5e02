"""Application service: Create Stock Return use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink
from ims.application.dto import ReturnItemSpec
from ims.application.numbering import next_document_number
from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.stock_return import ReturnLine, StockReturn
from ims.domain.model.value_objects import Quantity
from ims.domain.repository.batch_repository import BatchRepository
from ims.domain.repository.document_repository import DocumentRepository


class CreateReturnHandler:

    def __init__(
        self,
        return_repo: DocumentRepository[StockReturn],
        batch_repo: BatchRepository,
        audit: AuditSink,
    ) -> None:
        self._return_repo = return_repo
        self._batch_repo = batch_repo
        self._audit = audit

    def handle(
        self,
        actor: Actor,
        department_id: str,
        item_specs: list[ReturnItemSpec],
        reason: str,
        issue_id: str | None = None,
    ) -> StockReturn:
        lines: list[ReturnLine] = []
        for spec in item_specs:
            batch = self._batch_repo.get_by_id(spec.batch_id)
            if batch is None:
                raise EntityNotFoundError(f"Batch not found: {spec.batch_id}")
            if batch.item_id != spec.item_id:
                raise ValidationError(
                    f"Batch {batch.batch_number} does not hold item {spec.item_id}"
                )
            lines.append(
                ReturnLine(
                    item_id=spec.item_id,
                    batch_id=spec.batch_id,
                    quantity=Quantity.of(spec.quantity).value,
                    unit=spec.unit,
                )
            )

        with self._return_repo.locked():
            stock_return = StockReturn.create(
                return_number=next_document_number("RET", self._return_repo),
                returned_by=actor.user_id,
                department_id=department_id,
                items=lines,
                reason=reason,
                issue_id=issue_id,
            )
            self._return_repo.save(stock_return)
        self._audit.record(actor, "CREATE", "return", stock_return.id, after=stock_return)  # type: ignore[arg-type]
        return stock_return
