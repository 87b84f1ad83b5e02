"""Application service: Approve Issue Request use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.issue_request import IssueRequest
from ims.domain.repository.document_repository import DocumentRepository


class ApproveIssueHandler:

    def __init__(self, issue_repo: DocumentRepository[IssueRequest], audit: AuditSink) -> None:
        self._issue_repo = issue_repo
        self._audit = audit

    def handle(self, issue_id: str, actor: Actor) -> IssueRequest:
        with self._issue_repo.locked(issue_id):
            issue = self._issue_repo.get_by_id(issue_id)
            if issue is None:
                raise EntityNotFoundError(f"Issue request {issue_id} not found")
            before = snapshot(issue)
            issue.approve(actor)
            self._issue_repo.save(issue)

        self._audit.record(actor, "APPROVE", "issue_request", issue_id, before, issue)
        return issue
