"""Application service: Approve Purchase Requisition use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.requisition import PurchaseRequisition
from ims.domain.repository.document_repository import DocumentRepository


class ApproveRequisitionHandler:

    def __init__(
        self,
        requisition_repo: DocumentRepository[PurchaseRequisition],
        audit: AuditSink,
    ) -> None:
        self._requisition_repo = requisition_repo
        self._audit = audit

    def handle(self, requisition_id: str, actor: Actor) -> PurchaseRequisition:
        with self._requisition_repo.locked(requisition_id):
            pr = self._requisition_repo.get_by_id(requisition_id)
            if pr is None:
                raise EntityNotFoundError(f"Requisition {requisition_id} not found")
            before = snapshot(pr)
            pr.approve(actor)
            self._requisition_repo.save(pr)

        self._audit.record(actor, "APPROVE", "purchase_requisition", requisition_id, before, pr)
        return pr
