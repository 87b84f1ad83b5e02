"""Abstract repository shared by every document type.

PRs, POs, GRNs, issue requests, returns and consumption logs are all
stored and fetched the same way; only the document class differs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager, Generic, TypeVar

T = TypeVar("T")


class DocumentRepository(ABC, Generic[T]):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique document ID."""

    @abstractmethod
    def get_by_id(self, document_id: str) -> T | None:
        """Return a document by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[T]:
        """Return every stored document."""

    @abstractmethod
    def save(self, document: T) -> None:
        """Persist a new or updated document (assigns an id when missing)."""

    @abstractmethod
    def locked(self, document_id: str | None = None) -> ContextManager[None]:
        """Serialise a load-check-change-save cycle on one document.

        Callers load the document inside the block, so the status they
        check is the status they change.  Without an id the block covers
        creating a new document: its number and id stay unique until it
        is saved.
        """

    def count(self) -> int:
        return len(self.list_all())
