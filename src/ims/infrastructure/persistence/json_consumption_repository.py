"""JSON-file-backed repository for consumption logs."""

from __future__ import annotations

from ims.domain.model.consumption import ConsumptionLog
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_store import dec, iso, to_datetime, to_dec


class JsonConsumptionRepository(JsonDocumentRepository[ConsumptionLog]):

    @staticmethod
    def _to_raw(log: ConsumptionLog) -> dict:
        return {
            "id": log.id,
            "item_id": log.item_id,
            "batch_id": log.batch_id,
            "department_id": log.department_id,
            "theoretical_qty": dec(log.theoretical_qty),
            "actual_qty": dec(log.actual_qty),
            "variance": dec(log.variance),
            "consumed_by": log.consumed_by,
            "notes": log.notes,
            "consumed_at": iso(log.consumed_at),
            "created_at": iso(log.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> ConsumptionLog:
        return ConsumptionLog(
            id=raw["id"],
            item_id=raw["item_id"],
            batch_id=raw["batch_id"],
            department_id=raw.get("department_id", ""),
            theoretical_qty=to_dec(raw["theoretical_qty"]),  # type: ignore[arg-type]
            actual_qty=to_dec(raw["actual_qty"]),  # type: ignore[arg-type]
            variance=to_dec(raw["variance"]),  # type: ignore[arg-type]
            consumed_by=raw["consumed_by"],
            notes=raw.get("notes"),
            consumed_at=to_datetime(raw["consumed_at"]),  # type: ignore[arg-type]
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
        )
