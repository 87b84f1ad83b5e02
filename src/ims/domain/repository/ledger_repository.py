"""Abstract repository for the stock ledger.  Insert-only."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.ledger import LedgerEntry, LedgerQuery


class LedgerRepository(ABC):

    @abstractmethod
    def append(self, entry: LedgerEntry) -> str:
        """Store an entry and return its generated id."""

    @abstractmethod
    def query(self, filters: LedgerQuery | None = None) -> list[LedgerEntry]:
        """Return matching entries in the order they were appended."""
