"""Application service: Approve Stock Return use case.

Approval is what puts the stock back: every returned line is credited to
its batch (available and total both grow) with a RETURN ledger entry.
"""

from __future__ import annotations

from ims.application.audit_sink import AuditSink, snapshot
from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.actor import Actor
from ims.domain.model.ledger import Reference, ReferenceType
from ims.domain.model.stock_return import StockReturn
from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.service.stock_movement_service import ReturnCredit, StockMovementService


class ApproveReturnHandler:

    def __init__(
        self,
        return_repo: DocumentRepository[StockReturn],
        stock: StockMovementService,
        audit: AuditSink,
    ) -> None:
        self._return_repo = return_repo
        self._stock = stock
        self._audit = audit

    def handle(self, return_id: str, actor: Actor) -> StockReturn:
        with self._return_repo.locked(return_id):
            stock_return = self._return_repo.get_by_id(return_id)
            if stock_return is None:
                raise EntityNotFoundError(f"Return {return_id} not found")
            stock_return.check_approvable(actor)

            before = snapshot(stock_return)
            reference = Reference(ReferenceType.RETURN, stock_return.id)
            movements = self._stock.credit_returns(
                [ReturnCredit(line.item_id, line.batch_id, line.quantity) for line in stock_return.items],
                actor=actor,
                reference=reference,
                notes=f"Return: {stock_return.return_number}",
            )
            try:
                stock_return.approve(actor)
                self._return_repo.save(stock_return)
            except Exception:
                self._stock.reverse(movements, actor=actor, reference=reference)
                raise

        self._audit.record(actor, "APPROVE", "return", return_id, before, stock_return)
        return stock_return
