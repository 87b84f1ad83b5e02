"""JSON-file-backed implementation of ItemRepository."""

from __future__ import annotations

from pathlib import Path

from ims.domain.model.item import Item
from ims.domain.repository.item_repository import ItemRepository
from ims.infrastructure.persistence.json_store import JsonStore, dec, iso, to_datetime, to_dec


class JsonItemRepository(ItemRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonStore(file_path)

    # --- ItemRepository interface ---------------------------------------------

    def get_by_id(self, item_id: str) -> Item | None:
        for raw in self._store.load():
            if raw["id"] == item_id:
                return self._to_domain(raw)
        return None

    def get_by_code(self, code: str) -> Item | None:
        wanted = code.strip().lower()
        for raw in self._store.load():
            if raw["code"].lower() == wanted:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Item]:
        return [self._to_domain(raw) for raw in self._store.load()]

    def save(self, item: Item) -> None:
        with self._store.lock:
            if item.id is None:
                item.id = self._store.next_id()
            self._store.upsert(self._to_raw(item))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: Item) -> dict:
        return {
            "id": item.id,
            "code": item.code,
            "name": item.name,
            "category": item.category,
            "unit": item.unit,
            "min_stock": dec(item.min_stock),
            "reorder_level": dec(item.reorder_level),
            "description": item.description,
            "created_at": iso(item.created_at),
            "updated_at": iso(item.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Item:
        return Item(
            id=raw["id"],
            code=raw["code"],
            name=raw["name"],
            category=raw["category"],
            unit=raw["unit"],
            min_stock=to_dec(raw["min_stock"]),  # type: ignore[arg-type]
            reorder_level=to_dec(raw["reorder_level"]),  # type: ignore[arg-type]
            description=raw.get("description"),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
            updated_at=to_datetime(raw["updated_at"]),  # type: ignore[arg-type]
        )
