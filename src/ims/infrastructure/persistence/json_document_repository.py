"""Generic JSON-file-backed DocumentRepository.

Subclasses supply the ``_to_raw`` / ``_to_domain`` codecs for their
document type; storage, id assignment and upserts are shared.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Any, ContextManager, Generic, TypeVar

from ims.domain.repository.document_repository import DocumentRepository
from ims.domain.service.stock_locks import StockLocks
from ims.infrastructure.persistence.json_store import JsonStore

T = TypeVar("T")

NEW_DOCUMENT = "new"


class JsonDocumentRepository(DocumentRepository[T], Generic[T]):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonStore(file_path)
        self._locks = StockLocks()

    # --- DocumentRepository interface -----------------------------------------

    def next_id(self) -> str:
        return self._store.next_id()

    def get_by_id(self, document_id: str) -> T | None:
        for raw in self._store.load():
            if raw["id"] == document_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[T]:
        return [self._to_domain(raw) for raw in self._store.load()]

    def save(self, document: T) -> None:
        doc: Any = document
        with self._store.lock:
            if doc.id is None:
                doc.id = self._store.next_id()
            self._store.upsert(self._to_raw(document))

    def count(self) -> int:
        return len(self._store.load())

    def locked(self, document_id: str | None = None) -> ContextManager[None]:
        return self._locks.hold(document_id or NEW_DOCUMENT)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    @abstractmethod
    def _to_raw(document: T) -> dict: ...

    @staticmethod
    @abstractmethod
    def _to_domain(raw: dict) -> T: ...
