"""JSON-file-backed repository for goods receipt notes."""

from __future__ import annotations

from ims.domain.model.goods_receipt import GoodsReceiptNote, GrnLine, GrnStatus
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_store import (
    dec,
    iso,
    to_date,
    to_datetime,
    to_dec,
)


class JsonGrnRepository(JsonDocumentRepository[GoodsReceiptNote]):

    @staticmethod
    def _to_raw(grn: GoodsReceiptNote) -> dict:
        return {
            "id": grn.id,
            "grn_number": grn.grn_number,
            "po_id": grn.po_id,
            "supplier_id": grn.supplier_id,
            "received_by": grn.received_by,
            "status": grn.status.value,
            "total_amount": dec(grn.total_amount),
            "batch_ids": list(grn.batch_ids),
            "notes": grn.notes,
            "received_at": iso(grn.received_at),
            "created_at": iso(grn.created_at),
            "updated_at": iso(grn.updated_at),
            "items": [
                {
                    "item_id": line.item_id,
                    "batch_number": line.batch_number,
                    "quantity": dec(line.quantity),
                    "unit_price": dec(line.unit_price),
                    "location_id": line.location_id,
                    "expiry_date": iso(line.expiry_date),
                }
                for line in grn.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> GoodsReceiptNote:
        return GoodsReceiptNote(
            id=raw["id"],
            grn_number=raw["grn_number"],
            po_id=raw["po_id"],
            supplier_id=raw["supplier_id"],
            received_by=raw["received_by"],
            items=[
                GrnLine(
                    item_id=i["item_id"],
                    batch_number=i["batch_number"],
                    quantity=to_dec(i["quantity"]),  # type: ignore[arg-type]
                    unit_price=to_dec(i["unit_price"]),  # type: ignore[arg-type]
                    location_id=i["location_id"],
                    expiry_date=to_date(i.get("expiry_date")),
                )
                for i in raw["items"]
            ],
            status=GrnStatus(raw["status"]),
            batch_ids=list(raw.get("batch_ids", [])),
            notes=raw.get("notes"),
            received_at=to_datetime(raw["received_at"]),  # type: ignore[arg-type]
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
