"""Application service: Create Purchase Requisition use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink
from ims.application.dto import RequisitionItemSpec
from ims.application.numbering import next_document_number
from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.requisition import Priority, PurchaseRequisition, RequisitionLine
from ims.domain.model.value_objects import Quantity
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.repository.item_repository import ItemRepository


class CreateRequisitionHandler:

    def __init__(
        self,
        requisition_repo: DocumentRepository[PurchaseRequisition],
        item_repo: ItemRepository,
        audit: AuditSink,
    ) -> None:
        self._requisition_repo = requisition_repo
        self._item_repo = item_repo
        self._audit = audit

    def handle(
        self,
        actor: Actor,
        department_id: str,
        item_specs: list[RequisitionItemSpec],
    ) -> PurchaseRequisition:
        lines = [self._to_line(spec) for spec in item_specs]
        with self._requisition_repo.locked():
            pr = PurchaseRequisition.create(
                pr_number=next_document_number("PR", self._requisition_repo),
                requested_by=actor.user_id,
                department_id=department_id,
                items=lines,
            )
            self._requisition_repo.save(pr)
        self._audit.record(actor, "CREATE", "purchase_requisition", pr.id, after=pr)  # type: ignore[arg-type]
        return pr

    def _to_line(self, spec: RequisitionItemSpec) -> RequisitionLine:
        if self._item_repo.get_by_id(spec.item_id) is None:
            raise EntityNotFoundError(f"Item not found: '{spec.item_id}'")
        try:
            priority = Priority(spec.priority.lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown priority {spec.priority!r}") from exc
        return RequisitionLine(
            item_id=spec.item_id,
            quantity=Quantity.of(spec.quantity).value,
            unit=spec.unit,
            purpose=spec.purpose,
            priority=priority,
        )
