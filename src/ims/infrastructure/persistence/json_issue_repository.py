"""JSON-file-backed repository for issue requests."""

from __future__ import annotations

from ims.domain.model.issue_request import IssueLine, IssueRequest, IssueStatus
from ims.infrastructure.persistence.json_document_repository import JsonDocumentRepository
from ims.infrastructure.persistence.json_store import dec, iso, to_datetime, to_dec


class JsonIssueRepository(JsonDocumentRepository[IssueRequest]):

    @staticmethod
    def _to_raw(issue: IssueRequest) -> dict:
        return {
            "id": issue.id,
            "issue_number": issue.issue_number,
            "requested_by": issue.requested_by,
            "department_id": issue.department_id,
            "purpose": issue.purpose,
            "status": issue.status.value,
            "approved_by": issue.approved_by,
            "approved_at": iso(issue.approved_at),
            "issued_by": issue.issued_by,
            "issued_at": iso(issue.issued_at),
            "rejection_reason": issue.rejection_reason,
            "created_at": iso(issue.created_at),
            "updated_at": iso(issue.updated_at),
            "items": [
                {"item_id": line.item_id, "quantity": dec(line.quantity), "unit": line.unit}
                for line in issue.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> IssueRequest:
        return IssueRequest(
            id=raw["id"],
            issue_number=raw["issue_number"],
            requested_by=raw["requested_by"],
            department_id=raw["department_id"],
            items=[
                IssueLine(
                    item_id=i["item_id"],
                    quantity=to_dec(i["quantity"]),  # type: ignore[arg-type]
                    unit=i.get("unit", ""),
                )
                for i in raw["items"]
            ],
            purpose=raw.get("purpose", ""),
            status=IssueStatus(raw["status"]),
            approved_by=raw.get("approved_by"),
            approved_at=to_datetime(raw.get("approved_at")),
            issued_by=raw.get("issued_by"),
            issued_at=to_datetime(raw.get("issued_at")),
            rejection_reason=raw.get("rejection_reason"),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
