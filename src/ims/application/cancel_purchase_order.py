"""Application service: Cancel Purchase Order use case.

Any order that is not already completed or cancelled can be cancelled.
Stock already received against a partial order stays in its batches.
"""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.purchase_order import PurchaseOrder
from ims.domain.repository.document_repository import DocumentRepository


class CancelPurchaseOrderHandler:

    def __init__(self, po_repo: DocumentRepository[PurchaseOrder], audit: AuditSink) -> None:
        self._po_repo = po_repo
        self._audit = audit

    def handle(self, po_id: str, actor: Actor, reason: str | None = None) -> PurchaseOrder:
        with self._po_repo.locked(po_id):
            po = self._po_repo.get_by_id(po_id)
            if po is None:
                raise EntityNotFoundError(f"Purchase order {po_id} not found")
            before = snapshot(po)
            po.cancel(actor, reason)
            self._po_repo.save(po)

        self._audit.record(actor, "CANCEL", "purchase_order", po_id, before, po)
        return po
