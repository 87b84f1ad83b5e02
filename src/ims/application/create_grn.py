"""Application service: Create Goods Receipt use case.

Receiving goods is the only way stock enters the system.  For each
received line a new batch is opened and an IN ledger entry written; the
purchase order then moves to ``partial`` or ``completed`` depending on
how much of every line has now arrived.

Everything that can be checked is checked before the first batch is
written: the PO must be receivable, the actor must be allowed to
receive, and no line may exceed what is still outstanding.
"""

from __future__ import annotations

import logging

from ims.application.audit_sink import AuditSink, snapshot
from ims.application.dto import GrnItemSpec
from ims.application.numbering import next_document_number
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.goods_receipt import GoodsReceiptNote, GrnLine
from ims.domain.model.ledger import Reference, ReferenceType
from ims.domain.model.purchase_order import PurchaseOrder
from ims.domain.model.value_objects import Quantity, to_decimal
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.service.stock_movement_service import StockMovement, StockMovementService

logger = logging.getLogger(__name__)


class CreateGrnHandler:

    def __init__(
        self,
        grn_repo: DocumentRepository[GoodsReceiptNote],
        po_repo: DocumentRepository[PurchaseOrder],
        stock: StockMovementService,
        audit: AuditSink,
    ) -> None:
        self._grn_repo = grn_repo
        self._po_repo = po_repo
        self._stock = stock
        self._audit = audit

    def handle(
        self,
        po_id: str,
        item_specs: list[GrnItemSpec],
        actor: Actor,
        notes: str | None = None,
    ) -> GoodsReceiptNote:
        # Receipts against one PO are serialised, so outstanding quantities
        # checked here are still outstanding when the PO is saved
        with self._po_repo.locked(po_id), self._grn_repo.locked():
            po = self._po_repo.get_by_id(po_id)
            if po is None:
                raise EntityNotFoundError(f"Purchase order {po_id} not found")
            po.check_receivable()

            grn = self._build(po, item_specs, actor, notes)
            grn.check_completable(actor)
            received = grn.received_quantities()
            po.plan_receipt(received, actor)

            # Batches and ledger entries point at the GRN, so it needs its id first
            grn.id = self._grn_repo.next_id()
            reference = Reference(ReferenceType.GRN, grn.id)
            movements: list[StockMovement] = []
            try:
                for line in grn.items:
                    movements.append(self._receive(line, grn, actor, reference))
                grn.complete(actor, [m.batch.id for m in movements])  # type: ignore[arg-type]
                self._grn_repo.save(grn)
            except Exception:
                self._stock.reverse(movements, actor=actor, reference=reference)
                raise

            po_before = snapshot(po)
            po.record_receipt(received, actor)
            self._po_repo.save(po)

        logger.info(
            "GRN %s received %d line(s) against PO %s (now %s)",
            grn.grn_number, len(grn.items), po.po_number, po.status.value,
        )
        self._audit.record(actor, "CREATE", "grn", grn.id, after=grn)
        self._audit.record(actor, "RECEIVE", "purchase_order", po_id, po_before, po)
        return grn

    def _build(
        self,
        po: PurchaseOrder,
        item_specs: list[GrnItemSpec],
        actor: Actor,
        notes: str | None,
    ) -> GoodsReceiptNote:
        lines = [
            GrnLine(
                item_id=spec.item_id,
                batch_number=spec.batch_number,
                quantity=Quantity.of(spec.quantity).value,
                unit_price=to_decimal(spec.unit_price, "Unit price"),
                location_id=spec.location_id,
                expiry_date=spec.expiry_date,
            )
            for spec in item_specs
        ]
        return GoodsReceiptNote.create(
            grn_number=next_document_number("GRN", self._grn_repo),
            po_id=po.id,  # type: ignore[arg-type]
            supplier_id=po.supplier_id,
            received_by=actor.user_id,
            items=lines,
            notes=notes,
        )

    def _receive(
        self, line: GrnLine, grn: GoodsReceiptNote, actor: Actor, reference: Reference
    ) -> StockMovement:
        return self._stock.receive(
            item_id=line.item_id,
            batch_number=line.batch_number,
            location_id=line.location_id,
            purchase_price=line.unit_price,
            quantity=line.quantity,
            actor=actor,
            reference=reference,
            expiry_date=line.expiry_date,
            notes=f"GRN: {grn.grn_number}",
        )
