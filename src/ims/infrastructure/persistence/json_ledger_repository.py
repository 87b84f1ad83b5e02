"""JSON-file-backed implementation of LedgerRepository.  Append-only."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from ims.domain.model.ledger import LedgerEntry, LedgerQuery, ReferenceType, TransactionType
from ims.domain.repository.ledger_repository import LedgerRepository
from ims.infrastructure.persistence.json_store import JsonStore, dec, iso, to_datetime, to_dec


class JsonLedgerRepository(LedgerRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonStore(file_path)

    def append(self, entry: LedgerEntry) -> str:
        with self._store.lock:
            rows = self._store.load()
            entry_id = self._store.next_id(rows)
            rows.append(self._to_raw(replace(entry, id=entry_id)))
            self._store.persist(rows)
        return entry_id

    def query(self, filters: LedgerQuery | None = None) -> list[LedgerEntry]:
        entries = [self._to_domain(raw) for raw in self._store.load()]
        if filters is None:
            return entries
        return [e for e in entries if filters.matches(e)]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(entry: LedgerEntry) -> dict:
        return {
            "id": entry.id,
            "item_id": entry.item_id,
            "batch_id": entry.batch_id,
            "transaction_type": entry.transaction_type.value,
            "quantity": dec(entry.quantity),
            "unit_price": dec(entry.unit_price),
            "location_id": entry.location_id,
            "reference_id": entry.reference_id,
            "reference_type": entry.reference_type.value if entry.reference_type else None,
            "user_id": entry.user_id,
            "notes": entry.notes,
            "created_at": iso(entry.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> LedgerEntry:
        reference_type = raw.get("reference_type")
        return LedgerEntry(
            id=raw["id"],
            item_id=raw["item_id"],
            batch_id=raw.get("batch_id"),
            transaction_type=TransactionType(raw["transaction_type"]),
            quantity=to_dec(raw["quantity"]),  # type: ignore[arg-type]
            unit_price=to_dec(raw["unit_price"]),  # type: ignore[arg-type]
            location_id=raw["location_id"],
            reference_id=raw.get("reference_id"),
            reference_type=ReferenceType(reference_type) if reference_type else None,
            user_id=raw["user_id"],
            notes=raw.get("notes"),
            created_at=to_datetime(raw["created_at"]),  # type: ignore[arg-type]
        )
