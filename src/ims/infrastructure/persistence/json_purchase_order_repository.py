"""JSON-file-backed repository for purchase orders."""

from __future__ import annotations

from ims.domain.model.purchase_order import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)
from ims.domain.model.value_objects import Money
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_store import (
    dec,
    iso,
    to_date,
    to_datetime,
    to_dec,
)


class JsonPurchaseOrderRepository(JsonDocumentRepository[PurchaseOrder]):

    @staticmethod
    def _to_raw(po: PurchaseOrder) -> dict:
        return {
            "id": po.id,
            "po_number": po.po_number,
            "supplier_id": po.supplier_id,
            "pr_id": po.pr_id,
            "status": po.status.value,
            "currency": po.currency,
            "total_amount": dec(po.total.amount),
            "expected_delivery_date": iso(po.expected_delivery_date),
            "approved_by": po.approved_by,
            "approved_at": iso(po.approved_at),
            "sent_at": iso(po.sent_at),
            "cancelled_at": iso(po.cancelled_at),
            "cancellation_reason": po.cancellation_reason,
            "created_at": iso(po.created_at),
            "updated_at": iso(po.updated_at),
            "items": [
                {
                    "item_id": line.item_id,
                    "quantity": dec(line.quantity),
                    "unit": line.unit,
                    "unit_price": dec(line.unit_price.amount),
                    "total_price": dec(line.line_total.amount),
                    "received_qty": dec(line.received_qty),
                }
                for line in po.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> PurchaseOrder:
        currency = raw.get("currency", "INR")
        return PurchaseOrder(
            id=raw["id"],
            po_number=raw["po_number"],
            supplier_id=raw["supplier_id"],
            items=[
                PurchaseOrderLine(
                    item_id=i["item_id"],
                    quantity=to_dec(i["quantity"]),  # type: ignore[arg-type]
                    unit_price=Money(to_dec(i["unit_price"]), currency),  # type: ignore[arg-type]
                    unit=i.get("unit", ""),
                    received_qty=to_dec(i.get("received_qty", "0")),  # type: ignore[arg-type]
                )
                for i in raw["items"]
            ],
            pr_id=raw.get("pr_id"),
            status=PurchaseOrderStatus(raw["status"]),
            currency=currency,
            expected_delivery_date=to_date(raw.get("expected_delivery_date")),
            approved_by=raw.get("approved_by"),
            approved_at=to_datetime(raw.get("approved_at")),
            sent_at=to_datetime(raw.get("sent_at")),
            cancelled_at=to_datetime(raw.get("cancelled_at")),
            cancellation_reason=raw.get("cancellation_reason"),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
