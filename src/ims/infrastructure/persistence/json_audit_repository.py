"""JSON-file-backed implementation of AuditRepository."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from ims.domain.model.audit import AuditRecord
from ims.domain.repository.audit_repository import AuditRepository
from ims.infrastructure.persistence.json_store import JsonStore, iso, to_datetime


class JsonAuditRepository(AuditRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonStore(file_path)

    def append(self, record: AuditRecord) -> str:
        with self._store.lock:
            rows = self._store.load()
            record_id = self._store.next_id(rows)
            rows.append(self._to_raw(replace(record, id=record_id)))
            self._store.persist(rows)
        return record_id

    def list_all(self) -> list[AuditRecord]:
        return [self._to_domain(raw) for raw in self._store.load()]

    @staticmethod
    def _to_raw(record: AuditRecord) -> dict:
        return {
            "id": record.id,
            "user_id": record.user_id,
            "action": record.action,
            "entity": record.entity,
            "entity_id": record.entity_id,
            "before": record.before,
            "after": record.after,
            "timestamp": iso(record.timestamp),
        }

    @staticmethod
    def _to_domain(raw: dict) -> AuditRecord:
        return AuditRecord(
            id=raw["id"],
            user_id=raw["user_id"],
            action=raw["action"],
            entity=raw["entity"],
            entity_id=raw["entity_id"],
            before=raw.get("before"),
            after=raw.get("after"),
            timestamp=to_datetime(raw["timestamp"]),  # type: ignore[arg-type]
        )
