"""Abstract repository for audit records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.audit import AuditRecord


class AuditRepository(ABC):

    @abstractmethod
    def append(self, record: AuditRecord) -> str:
        """Store a record and return its generated id."""

    @abstractmethod
    def list_all(self) -> list[AuditRecord]:
        """Return every record, oldest first."""
