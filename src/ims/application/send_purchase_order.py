"""Application service: Send Purchase Order use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.purchase_order import PurchaseOrder
from ims.domain.repository.document_repository import DocumentRepository


class SendPurchaseOrderHandler:

    def __init__(self, po_repo: DocumentRepository[PurchaseOrder], audit: AuditSink) -> None:
        self._po_repo = po_repo
        self._audit = audit

    def handle(self, po_id: str, actor: Actor) -> PurchaseOrder:
        with self._po_repo.locked(po_id):
            po = self._po_repo.get_by_id(po_id)
            if po is None:
                raise EntityNotFoundError(f"Purchase order {po_id} not found")
            before = snapshot(po)
            po.send(actor)
            self._po_repo.save(po)

        self._audit.record(actor, "SEND", "purchase_order", po_id, before, po)
        return po
