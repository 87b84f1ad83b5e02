"""Application service: Add Item use case."""

from __future__ import annotations

from decimal import Decimal

from ims.application.audit_sink import AuditSink
from ims.domain.exceptions import ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.item import Item
from ims.domain.repository.item_repository import ItemRepository


class AddItemHandler:

    def __init__(self, item_repo: ItemRepository, audit: AuditSink) -> None:
        self._item_repo = item_repo
        self._audit = audit

    def handle(
        self,
        actor: Actor,
        code: str,
        name: str,
        category: str,
        unit: str,
        min_stock: Decimal | int | float | str = 0,
        reorder_level: Decimal | int | float | str = 0,
        description: str | None = None,
    ) -> Item:
        """Add a new item to the catalog.  Codes are unique."""
        item = Item.create(code, name, category, unit, min_stock, reorder_level, description)

        if self._item_repo.get_by_code(item.code) is not None:
            raise ValidationError(f"Item with code '{item.code}' already exists")

        self._item_repo.save(item)
        self._audit.record(actor, "CREATE", "item", item.id, after=item)  # type: ignore[arg-type]
        return item
