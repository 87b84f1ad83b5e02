"""Abstract repository for ItemBatch — the batch store.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations live in the infrastructure
layer (and as in-memory fakes in the tests).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ims.domain.model.batch import ItemBatch


class BatchRepository(ABC):

    @abstractmethod
    def add(self, batch: ItemBatch) -> ItemBatch:
        """Persist a new batch, assigning its id."""

    @abstractmethod
    def get_by_id(self, batch_id: str) -> ItemBatch | None:
        """Return a batch by its ID, or None if not found."""

    @abstractmethod
    def find_available(self, item_id: str, location_id: str | None = None) -> list[ItemBatch]:
        """Return batches with stock left, oldest ``created_at`` first."""

    @abstractmethod
    def list_batches(
        self, item_id: str | None = None, location_id: str | None = None
    ) -> list[ItemBatch]:
        """Return every matching batch, depleted ones included, oldest first."""

    @abstractmethod
    def adjust_available(
        self, batch_id: str, delta: Decimal, *, affects_total: bool = False
    ) -> ItemBatch:
        """Atomically move a batch's available quantity by *delta*.

        The read, the guard (``available + delta >= 0``) and the write
        happen as one step.  Raises EntityNotFoundError for an unknown
        batch and InsufficientStockError when the guard fails; the
        stored batch is unchanged in both cases.
        """
