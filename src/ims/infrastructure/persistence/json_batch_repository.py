"""JSON-file-backed implementation of BatchRepository.

``adjust_available`` does its load, guard and write while holding the
store lock, which makes it the conditional update every stock movement
relies on.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from ims.domain.exceptions import EntityNotFoundError
from ims.domain.model.batch import ItemBatch
from ims.domain.repository.batch_repository import BatchRepository
from ims.infrastructure.persistence.json_store import (
    JsonStore,
    dec,
    iso,
    to_date,
    to_datetime,
    to_dec,
)


class JsonBatchRepository(BatchRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonStore(file_path)

    # --- BatchRepository interface --------------------------------------------

    def add(self, batch: ItemBatch) -> ItemBatch:
        with self._store.lock:
            rows = self._store.load()
            batch.id = self._store.next_id(rows)
            rows.append(self._to_raw(batch))
            self._store.persist(rows)
        return batch

    def get_by_id(self, batch_id: str) -> ItemBatch | None:
        for raw in self._store.load():
            if raw["id"] == batch_id:
                return self._to_domain(raw)
        return None

    def find_available(self, item_id: str, location_id: str | None = None) -> list[ItemBatch]:
        return [
            b for b in self.list_batches(item_id, location_id) if b.available_qty > Decimal("0")
        ]

    def list_batches(
        self, item_id: str | None = None, location_id: str | None = None
    ) -> list[ItemBatch]:
        batches = [
            self._to_domain(raw)
            for raw in self._store.load()
            if (item_id is None or raw["item_id"] == item_id)
            and (location_id is None or raw["location_id"] == location_id)
        ]
        return sorted(batches, key=lambda b: (b.created_at, int(b.id)))  # type: ignore[arg-type]

    def adjust_available(
        self, batch_id: str, delta: Decimal, *, affects_total: bool = False
    ) -> ItemBatch:
        with self._store.lock:
            rows = self._store.load()
            for i, raw in enumerate(rows):
                if raw["id"] == batch_id:
                    batch = self._to_domain(raw)
                    batch.apply_delta(delta, affects_total=affects_total)
                    rows[i] = self._to_raw(batch)
                    self._store.persist(rows)
                    return batch
        raise EntityNotFoundError(f"Batch not found: {batch_id}")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(batch: ItemBatch) -> dict:
        return {
            "id": batch.id,
            "item_id": batch.item_id,
            "batch_number": batch.batch_number,
            "location_id": batch.location_id,
            "purchase_price": dec(batch.purchase_price),
            "total_qty": dec(batch.total_qty),
            "available_qty": dec(batch.available_qty),
            "grn_id": batch.grn_id,
            "expiry_date": iso(batch.expiry_date),
            "created_at": iso(batch.created_at),
            "updated_at": iso(batch.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> ItemBatch:
        return ItemBatch(
            id=raw["id"],
            item_id=raw["item_id"],
            batch_number=raw["batch_number"],
            location_id=raw["location_id"],
            purchase_price=to_dec(raw["purchase_price"]),  # type: ignore[arg-type]
            total_qty=to_dec(raw["total_qty"]),  # type: ignore[arg-type]
            available_qty=to_dec(raw["available_qty"]),  # type: ignore[arg-type]
            grn_id=raw.get("grn_id"),
            expiry_date=to_date(raw.get("expiry_date")),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
