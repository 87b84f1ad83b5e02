"""Application service: Reject Stock Return use case."""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.stock_return import StockReturn
from ims.domain.repository.document_repository import DocumentRepository


class RejectReturnHandler:

    def __init__(self, return_repo: DocumentRepository[StockReturn], audit: AuditSink) -> None:
        self._return_repo = return_repo
        self._audit = audit

    def handle(self, return_id: str, actor: Actor, reason: str | None = None) -> StockReturn:
        with self._return_repo.locked(return_id):
            stock_return = self._return_repo.get_by_id(return_id)
            if stock_return is None:
                raise EntityNotFoundError(f"Return {return_id} not found")
            before = snapshot(stock_return)
            stock_return.reject(actor, reason)
            self._return_repo.save(stock_return)

        self._audit.record(actor, "REJECT", "return", return_id, before, stock_return)
        return stock_return
