"""Application service: Issue Items use case.

Draws an approved request out of stock.  Each line is allocated FIFO
across the item's batches; if any line cannot be covered the whole
request fails with InsufficientStockError and nothing is written.
"""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.issue_request import IssueRequest
from ims.domain.model.ledger import Reference, ReferenceType
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.service.stock_movement_service import StockMovement, StockMovementService


class IssueItemsHandler:

    def __init__(
        self,
        issue_repo: DocumentRepository[IssueRequest],
        stock: StockMovementService,
        audit: AuditSink,
    ) -> None:
        self._issue_repo = issue_repo
        self._stock = stock
        self._audit = audit

    def handle(
        self, issue_id: str, actor: Actor, location_id: str | None = None
    ) -> tuple[IssueRequest, list[StockMovement]]:
        # The status is re-read under the document lock, so a request can
        # only be drawn once however many fulfils race for it
        with self._issue_repo.locked(issue_id):
            issue = self._issue_repo.get_by_id(issue_id)
            if issue is None:
                raise EntityNotFoundError(f"Issue request {issue_id} not found")
            issue.check_issuable(actor)

            before = snapshot(issue)
            reference = Reference(ReferenceType.ISSUE, issue.id)
            movements = self._stock.issue(
                issue.requested_quantities(),
                actor=actor,
                reference=reference,
                location_id=location_id,
                notes=f"Issue: {issue.issue_number}",
            )
            try:
                issue.mark_issued(actor)
                self._issue_repo.save(issue)
            except Exception:
                self._stock.reverse(movements, actor=actor, reference=reference)
                raise

        self._audit.record(
            actor,
            "ISSUE",
            "issue_request",
            issue_id,
            before,
            {
                "issue": snapshot(issue),
                "batches": [
                    {"batch_id": m.batch.id, "quantity": str(-m.entry.quantity)} for m in movements
                ],
            },
        )
        return issue, movements
