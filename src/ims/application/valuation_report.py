"""Application service: Inventory Valuation use case (query)."""

from __future__ import annotations

from ims.domain.repository.batch_repository import BatchRepository
from ims.domain.service.allocation import ValuationMethod, ValuationResult, value_inventory


class ValuationReportHandler:

    def __init__(self, batch_repo: BatchRepository, default_method: str = "fifo") -> None:
        self._batch_repo = batch_repo
        self._default_method = ValuationMethod.parse(default_method)

    def handle(
        self,
        method: str | ValuationMethod | None = None,
        item_id: str | None = None,
        location_id: str | None = None,
    ) -> ValuationResult:
        chosen = self._default_method if method is None else ValuationMethod.parse(method)
        batches = self._batch_repo.list_batches(item_id, location_id)
        return value_inventory(batches, chosen)
