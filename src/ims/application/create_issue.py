"""Application service: Create Issue Request use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink
from ims.application.dto import IssueItemSpec
from ims.application.numbering import next_document_number
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.issue_request import IssueLine, IssueRequest
from ims.domain.model.value_objects import Quantity
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.repository.item_repository import ItemRepository


class CreateIssueHandler:

    def __init__(
        self,
        issue_repo: DocumentRepository[IssueRequest],
        item_repo: ItemRepository,
        audit: AuditSink,
    ) -> None:
        self._issue_repo = issue_repo
        self._item_repo = item_repo
        self._audit = audit

    def handle(
        self,
        actor: Actor,
        department_id: str,
        item_specs: list[IssueItemSpec],
        purpose: str = "",
    ) -> IssueRequest:
        """Raise a pending issue request.  No stock moves until it is issued."""
        lines: list[IssueLine] = []
        for spec in item_specs:
            if self._item_repo.get_by_id(spec.item_id) is None:
                raise EntityNotFoundError(f"Item not found: '{spec.item_id}'")
            lines.append(
                IssueLine(item_id=spec.item_id, quantity=Quantity.of(spec.quantity).value, unit=spec.unit)
            )

        with self._issue_repo.locked():
            issue = IssueRequest.create(
                issue_number=next_document_number("ISS", self._issue_repo),
                requested_by=actor.user_id,
                department_id=department_id,
                items=lines,
                purpose=purpose,
            )
            self._issue_repo.save(issue)
        self._audit.record(actor, "CREATE", "issue_request", issue.id, after=issue)  # type: ignore[arg-type]
        return issue
