"""Application service: Audit Query use case (query)."""

from __future__ import annotations

from ims.domain.model.audit import AuditRecord
from ims.domain.repository.audit_repository import AuditRepository


class AuditQueryHandler:

    def __init__(self, audit_repo: AuditRepository) -> None:
        self._audit_repo = audit_repo

    def handle(
        self,
        entity: str | None = None,
        entity_id: str | None = None,
        user_id: str | None = None,
    ) -> list[AuditRecord]:
        return [
            record
            for record in self._audit_repo.list_all()
            if (entity is None or record.entity == entity)
            and (entity_id is None or record.entity_id == entity_id)
            and (user_id is None or record.user_id == user_id)
        ]
