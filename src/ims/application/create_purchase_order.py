"""Application service: Create Purchase Order use case.

Line totals and the order total are computed from the unit prices given
here; those prices are locked into the order.  When the order is raised
from a requisition, the requisition must be approved and is marked
converted.
"""

from __future__ import annotations

from contextlib import nullcontext
from datetime import date

from ims.application.audit_sink import AuditSink, snapshot
from ims.application.dto import PurchaseOrderItemSpec
from ims.application.numbering import next_document_number
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.purchase_order import PurchaseOrder, PurchaseOrderLine
from ims.domain.model.requisition import PurchaseRequisition
from ims.domain.model.value_objects import Money, Quantity
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.repository.item_repository import ItemRepository


class CreatePurchaseOrderHandler:

    def __init__(
        self,
        po_repo: DocumentRepository[PurchaseOrder],
        requisition_repo: DocumentRepository[PurchaseRequisition],
        item_repo: ItemRepository,
        audit: AuditSink,
        currency: str = "INR",
    ) -> None:
        self._po_repo = po_repo
        self._requisition_repo = requisition_repo
        self._item_repo = item_repo
        self._audit = audit
        self._currency = currency

    def handle(
        self,
        actor: Actor,
        supplier_id: str,
        item_specs: list[PurchaseOrderItemSpec],
        pr_id: str | None = None,
        expected_delivery_date: date | None = None,
    ) -> PurchaseOrder:
        lines: list[PurchaseOrderLine] = []
        for spec in item_specs:
            if self._item_repo.get_by_id(spec.item_id) is None:
                raise EntityNotFoundError(f"Item not found: '{spec.item_id}'")
            lines.append(
                PurchaseOrderLine(
                    item_id=spec.item_id,
                    quantity=Quantity.of(spec.quantity).value,
                    unit_price=Money.of(spec.unit_price, self._currency),
                    unit=spec.unit,
                )
            )

        pr_scope = self._requisition_repo.locked(pr_id) if pr_id is not None else nullcontext()
        with self._po_repo.locked(), pr_scope:
            po = PurchaseOrder.create(
                po_number=next_document_number("PO", self._po_repo),
                supplier_id=supplier_id,
                items=lines,
                pr_id=pr_id,
                currency=self._currency,
                expected_delivery_date=expected_delivery_date,
            )

            pr = None
            pr_before = None
            if pr_id is not None:
                pr = self._requisition_repo.get_by_id(pr_id)
                if pr is None:
                    raise EntityNotFoundError(f"Requisition {pr_id} not found")
                pr_before = snapshot(pr)
                pr.mark_converted(actor)

            self._po_repo.save(po)
            if pr is not None:
                self._requisition_repo.save(pr)

        if pr is not None:
            self._audit.record(actor, "CONVERT", "purchase_requisition", pr.id, pr_before, pr)  # type: ignore[arg-type]
        self._audit.record(actor, "CREATE", "purchase_order", po.id, after=po)  # type: ignore[arg-type]
        return po
