"""Application service: Ledger Query use case (query)."""

from __future__ import annotations

from ims.application.dto import LedgerLineDTO
from ims.domain.model.ledger import LedgerEntry, LedgerQuery
from ims.domain.repository.ledger_repository import LedgerRepository


class LedgerQueryHandler:

    def __init__(self, ledger_repo: LedgerRepository) -> None:
        self._ledger_repo = ledger_repo

    def handle(self, filters: LedgerQuery | None = None) -> list[LedgerLineDTO]:
        return [self._to_dto(entry) for entry in self._ledger_repo.query(filters)]

    @staticmethod
    def _to_dto(entry: LedgerEntry) -> LedgerLineDTO:
        if entry.reference_type is None:
            reference = ""
        else:
            reference = f"{entry.reference_type.value}:{entry.reference_id or '-'}"
        return LedgerLineDTO(
            entry_id=entry.id,  # type: ignore[arg-type]
            item_id=entry.item_id,
            batch_id=entry.batch_id,
            transaction_type=entry.transaction_type.value,
            quantity=entry.quantity,
            unit_price=entry.unit_price,
            location_id=entry.location_id,
            reference=reference,
            created_at=entry.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )
