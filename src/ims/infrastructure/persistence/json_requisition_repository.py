"""JSON-file-backed repository for purchase requisitions."""

from __future__ import annotations

from ims.domain.model.requisition import (
    Priority,
    PurchaseRequisition,
    RequisitionLine,
    RequisitionStatus,
)
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_store import dec, iso, to_datetime, to_dec


class JsonRequisitionRepository(JsonDocumentRepository[PurchaseRequisition]):

    @staticmethod
    def _to_raw(pr: PurchaseRequisition) -> dict:
        return {
            "id": pr.id,
            "pr_number": pr.pr_number,
            "requested_by": pr.requested_by,
            "department_id": pr.department_id,
            "status": pr.status.value,
            "approved_by": pr.approved_by,
            "approved_at": iso(pr.approved_at),
            "rejection_reason": pr.rejection_reason,
            "created_at": iso(pr.created_at),
            "updated_at": iso(pr.updated_at),
            "items": [
                {
                    "item_id": line.item_id,
                    "quantity": dec(line.quantity),
                    "unit": line.unit,
                    "purpose": line.purpose,
                    "priority": line.priority.value,
                }
                for line in pr.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> PurchaseRequisition:
        return PurchaseRequisition(
            id=raw["id"],
            pr_number=raw["pr_number"],
            requested_by=raw["requested_by"],
            department_id=raw["department_id"],
            items=[
                RequisitionLine(
                    item_id=i["item_id"],
                    quantity=to_dec(i["quantity"]),  # type: ignore[arg-type]
                    unit=i.get("unit", ""),
                    purpose=i.get("purpose", ""),
                    priority=Priority(i.get("priority", "medium")),
                )
                for i in raw["items"]
            ],
            status=RequisitionStatus(raw["status"]),
            approved_by=raw.get("approved_by"),
            approved_at=to_datetime(raw.get("approved_at")),
            rejection_reason=raw.get("rejection_reason"),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
