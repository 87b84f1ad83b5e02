"""Abstract repository for the Item catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.item import Item


class ItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, item_id: str) -> Item | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def get_by_code(self, code: str) -> Item | None:
        """Return an item by its unique code, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Item]:
        """Return every item in the catalog."""

    @abstractmethod
    def save(self, item: Item) -> None:
        """Persist a new or updated item (assigns an id when missing)."""
