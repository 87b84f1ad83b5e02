"""Application service: Reorder Check use case (query).

Lists catalog items whose available stock has fallen to their reorder
level.  Items at or below their minimum stock are flagged urgent.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ims.domain.model.value_objects import ZERO
from ims.domain.repository.batch_repository import BatchRepository
from ims.domain.repository.item_repository import ItemRepository


@dataclass(frozen=True)
class ReorderLineDTO:
    item_id: str
    item_code: str
    item_name: str
    available_qty: Decimal
    reorder_level: Decimal
    min_stock: Decimal
    needs_urgent_reorder: bool


class CheckReorderHandler:

    def __init__(self, item_repo: ItemRepository, batch_repo: BatchRepository) -> None:
        self._item_repo = item_repo
        self._batch_repo = batch_repo

    def handle(self) -> list[ReorderLineDTO]:
        available: dict[str, Decimal] = {}
        for batch in self._batch_repo.list_batches():
            available[batch.item_id] = available.get(batch.item_id, ZERO) + batch.available_qty

        lines: list[ReorderLineDTO] = []
        for item in self._item_repo.list_all():
            on_hand = available.get(item.id, ZERO)  # type: ignore[arg-type]
            if on_hand > item.reorder_level:
                continue
            lines.append(
                ReorderLineDTO(
                    item_id=item.id,  # type: ignore[arg-type]
                    item_code=item.code,
                    item_name=item.name,
                    available_qty=on_hand,
                    reorder_level=item.reorder_level,
                    min_stock=item.min_stock,
                    needs_urgent_reorder=on_hand <= item.min_stock,
                )
            )
        return lines
