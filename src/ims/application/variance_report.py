"""Application service: Consumption Variance Report use case (query)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ims.domain.model.consumption import ConsumptionLog
from ims.domain.model.value_objects import ZERO
from ims.domain.repository.document_repository import DocumentRepository

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ItemVarianceDTO:
    item_id: str
    records: int
    theoretical_qty: Decimal
    actual_qty: Decimal
    variance: Decimal

    @property
    def variance_percentage(self) -> Decimal:
        if self.theoretical_qty == ZERO:
            return ZERO
        return (self.variance / self.theoretical_qty * _HUNDRED).quantize(Decimal("0.01"))


class VarianceReportHandler:

    def __init__(self, consumption_repo: DocumentRepository[ConsumptionLog]) -> None:
        self._consumption_repo = consumption_repo

    def handle(
        self,
        item_id: str | None = None,
        department_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ItemVarianceDTO]:
        totals: dict[str, list[Decimal]] = {}
        counts: dict[str, int] = {}
        for log in self._consumption_repo.list_all():
            if item_id is not None and log.item_id != item_id:
                continue
            if department_id is not None and log.department_id != department_id:
                continue
            if since is not None and log.consumed_at < since:
                continue
            if until is not None and log.consumed_at > until:
                continue
            acc = totals.setdefault(log.item_id, [ZERO, ZERO, ZERO])
            acc[0] += log.theoretical_qty
            acc[1] += log.actual_qty
            acc[2] += log.variance
            counts[log.item_id] = counts.get(log.item_id, 0) + 1

        return [
            ItemVarianceDTO(
                item_id=key,
                records=counts[key],
                theoretical_qty=acc[0],
                actual_qty=acc[1],
                variance=acc[2],
            )
            for key, acc in sorted(totals.items())
        ]
