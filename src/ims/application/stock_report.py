"""Application service: Stock Report use case (query)."""

from __future__ import annotations

from ims.application.dto import StockBatchDTO, StockLineDTO
from ims.domain.model.batch import ItemBatch
from ims.domain.model.value_objects import ZERO
from ims.domain.repository.batch_repository import BatchRepository
from ims.domain.repository.item_repository import ItemRepository


class StockReportHandler:

    def __init__(self, batch_repo: BatchRepository, item_repo: ItemRepository) -> None:
        self._batch_repo = batch_repo
        self._item_repo = item_repo

    def handle(
        self, item_id: str | None = None, location_id: str | None = None
    ) -> list[StockLineDTO]:
        """Per-item totals with the batches that make them up.

        Depleted batches are left out of the breakdown but items that
        have run dry still appear with zero available.
        """
        grouped: dict[str, list[ItemBatch]] = {}
        for batch in self._batch_repo.list_batches(item_id, location_id):
            grouped.setdefault(batch.item_id, []).append(batch)

        lines: list[StockLineDTO] = []
        for batch_item_id, batches in grouped.items():
            item = self._item_repo.get_by_id(batch_item_id)
            lines.append(
                StockLineDTO(
                    item_id=batch_item_id,
                    item_code=item.code if item else "",
                    item_name=item.name if item else "(unknown item)",
                    category=item.category if item else "",
                    unit=item.unit if item else "",
                    total_qty=sum((b.total_qty for b in batches), ZERO),
                    available_qty=sum((b.available_qty for b in batches), ZERO),
                    batches=[
                        StockBatchDTO(
                            batch_id=b.id,  # type: ignore[arg-type]
                            batch_number=b.batch_number,
                            location_id=b.location_id,
                            total_qty=b.total_qty,
                            available_qty=b.available_qty,
                            purchase_price=b.purchase_price,
                            expiry_date=b.expiry_date,
                        )
                        for b in batches
                        if b.available_qty > ZERO
                    ],
                )
            )
        return sorted(lines, key=lambda line: line.item_code)
