"""GoodsReceiptNote — confirms physical receipt against a purchase order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.actor import Actor, Role
from ims.domain.model.clock import utcnow
from ims.domain.model.state_machine import StatefulDocument, StatusMachine, transition
from ims.domain.model.value_objects import ZERO


class GrnStatus(Enum):
    DRAFT = "draft"
    COMPLETED = "completed"


@dataclass
class GrnLine:
    item_id: str
    batch_number: str
    quantity: Decimal
    unit_price: Decimal
    location_id: str
    expiry_date: date | None = None

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass
class GoodsReceiptNote(StatefulDocument):
    MACHINE = StatusMachine(
        "goods receipt",
        [
            transition(
                "complete",
                [GrnStatus.DRAFT],
                GrnStatus.COMPLETED,
                (Role.ADMIN, Role.STOREKEEPER, Role.ACCOUNTS),
            ),
        ],
    )

    id: str | None
    grn_number: str
    po_id: str
    supplier_id: str
    received_by: str
    items: list[GrnLine]
    status: GrnStatus = GrnStatus.DRAFT
    batch_ids: list[str] = field(default_factory=list)
    notes: str | None = None
    received_at: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        grn_number: str,
        po_id: str,
        supplier_id: str,
        received_by: str,
        items: list[GrnLine],
        notes: str | None = None,
    ) -> GoodsReceiptNote:
        if not items:
            raise ValidationError("Goods receipt must contain at least one item")
        for line in items:
            if line.quantity <= ZERO:
                raise ValidationError(f"Quantity for item {line.item_id} must be positive")
            if line.unit_price <= ZERO:
                raise ValidationError(f"Unit price for item {line.item_id} must be positive")
            if not line.batch_number or not line.location_id:
                raise ValidationError(
                    f"Batch number and location are required for item {line.item_id}"
                )
        return GoodsReceiptNote(
            id=None,
            grn_number=grn_number,
            po_id=po_id,
            supplier_id=supplier_id,
            received_by=received_by,
            items=list(items),
            notes=notes,
        )

    def complete(self, actor: Actor, batch_ids: list[str]) -> None:
        self.transition("complete", actor)
        self.batch_ids = list(batch_ids)

    @property
    def total_amount(self) -> Decimal:
        return sum((line.line_total for line in self.items), ZERO)

    def received_quantities(self) -> dict[str, Decimal]:
        """Quantities per item (an item may arrive in several batches)."""
        totals: dict[str, Decimal] = {}
        for line in self.items:
            totals[line.item_id] = totals.get(line.item_id, ZERO) + line.quantity
        return totals

    def check_completable(self, actor: Actor) -> None:
        self.MACHINE.next_status(self.status, "complete", actor.role)
