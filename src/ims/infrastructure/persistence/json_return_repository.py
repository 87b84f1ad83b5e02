"""JSON-file-backed repository for stock returns."""

from __future__ import annotations

from ims.domain.model.stock_return import ReturnLine, ReturnStatus, StockReturn
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_store import dec, iso, to_datetime, to_dec


class JsonReturnRepository(JsonDocumentRepository[StockReturn]):

    @staticmethod
    def _to_raw(stock_return: StockReturn) -> dict:
        return {
            "id": stock_return.id,
            "return_number": stock_return.return_number,
            "returned_by": stock_return.returned_by,
            "department_id": stock_return.department_id,
            "reason": stock_return.reason,
            "issue_id": stock_return.issue_id,
            "status": stock_return.status.value,
            "approved_by": stock_return.approved_by,
            "approved_at": iso(stock_return.approved_at),
            "rejection_reason": stock_return.rejection_reason,
            "created_at": iso(stock_return.created_at),
            "updated_at": iso(stock_return.updated_at),
            "items": [
                {
                    "item_id": line.item_id,
                    "batch_id": line.batch_id,
                    "quantity": dec(line.quantity),
                    "unit": line.unit,
                }
                for line in stock_return.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockReturn:
        return StockReturn(
            id=raw["id"],
            return_number=raw["return_number"],
            returned_by=raw["returned_by"],
            department_id=raw["department_id"],
            items=[
                ReturnLine(
                    item_id=i["item_id"],
                    batch_id=i["batch_id"],
                    quantity=to_dec(i["quantity"]),  # type: ignore[arg-type]
                    unit=i.get("unit", ""),
                )
                for i in raw["items"]
            ],
            reason=raw.get("reason", ""),
            issue_id=raw.get("issue_id"),
            status=ReturnStatus(raw["status"]),
            approved_by=raw.get("approved_by"),
            approved_at=to_datetime(raw.get("approved_at")),
            rejection_reason=raw.get("rejection_reason"),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
