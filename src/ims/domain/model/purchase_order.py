"""PurchaseOrder aggregate.

Owns its line items.  Unit prices are locked when the order is raised,
and each line tracks how much has been received against it so that goods
receipts can drive the order to ``partial`` or ``completed``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.actor import Actor, Role
from ims.domain.model.clock import utcnow
from ims.domain.model.state_machine import StatefulDocument, StatusMachine, transition
from ims.domain.model.value_objects import ZERO, Money


class PurchaseOrderStatus(Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    SENT = "sent"
    PARTIAL = "partial"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_BUYERS = (Role.ADMIN, Role.ACCOUNTS)
_RECEIVERS = (Role.ADMIN, Role.STOREKEEPER, Role.ACCOUNTS)
_RECEIVABLE = (PurchaseOrderStatus.SENT, PurchaseOrderStatus.PARTIAL)


@dataclass
class PurchaseOrderLine:
    item_id: str
    quantity: Decimal
    unit_price: Money  # locked at order-creation time
    unit: str = ""
    received_qty: Decimal = ZERO

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def outstanding_qty(self) -> Decimal:
        return max(self.quantity - self.received_qty, ZERO)

    @property
    def is_fully_received(self) -> bool:
        return self.received_qty >= self.quantity

    def receive(self, qty: Decimal) -> None:
        if qty <= ZERO:
            raise ValidationError("Received quantity must be positive")
        if qty > self.outstanding_qty:
            raise ValidationError(
                f"Cannot receive {qty} of item {self.item_id}: "
                f"only {self.outstanding_qty} outstanding"
            )
        self.received_qty += qty


@dataclass
class PurchaseOrder(StatefulDocument):
    MACHINE = StatusMachine(
        "purchase order",
        [
            transition("approve", [PurchaseOrderStatus.DRAFT], PurchaseOrderStatus.APPROVED, _BUYERS),
            transition("send", [PurchaseOrderStatus.APPROVED], PurchaseOrderStatus.SENT, _BUYERS),
            transition("receive_partial", _RECEIVABLE, PurchaseOrderStatus.PARTIAL, _RECEIVERS),
            transition("receive_complete", _RECEIVABLE, PurchaseOrderStatus.COMPLETED, _RECEIVERS),
            transition(
                "cancel",
                [
                    PurchaseOrderStatus.DRAFT,
                    PurchaseOrderStatus.APPROVED,
                    PurchaseOrderStatus.SENT,
                    PurchaseOrderStatus.PARTIAL,
                ],
                PurchaseOrderStatus.CANCELLED,
                _BUYERS,
            ),
        ],
    )

    id: str | None
    po_number: str
    supplier_id: str
    items: list[PurchaseOrderLine]
    pr_id: str | None = None
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    currency: str = "INR"
    expected_delivery_date: date | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    sent_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        po_number: str,
        supplier_id: str,
        items: list[PurchaseOrderLine],
        pr_id: str | None = None,
        currency: str = "INR",
        expected_delivery_date: date | None = None,
    ) -> PurchaseOrder:
        if not supplier_id:
            raise ValidationError("Supplier is required")
        if not items:
            raise ValidationError("Purchase order must contain at least one item")

        seen: set[str] = set()
        for line in items:
            if line.quantity <= ZERO:
                raise ValidationError(f"Quantity for item {line.item_id} must be positive")
            if line.unit_price.amount <= ZERO:
                raise ValidationError(f"Unit price for item {line.item_id} must be positive")
            if line.item_id in seen:
                raise ValidationError(f"Item {line.item_id} appears more than once")
            seen.add(line.item_id)

        return PurchaseOrder(
            id=None,
            po_number=po_number,
            supplier_id=supplier_id,
            items=list(items),
            pr_id=pr_id,
            currency=currency,
            expected_delivery_date=expected_delivery_date,
        )

    # --- State transitions ----------------------------------------------------

    def approve(self, actor: Actor) -> None:
        self.transition("approve", actor)
        self.approved_by = actor.user_id
        self.approved_at = self.updated_at

    def send(self, actor: Actor) -> None:
        self.transition("send", actor)
        self.sent_at = self.updated_at

    def cancel(self, actor: Actor, reason: str | None = None) -> None:
        self.transition("cancel", actor)
        self.cancelled_at = self.updated_at
        self.cancellation_reason = reason or "No reason provided"

    def check_receivable(self) -> None:
        """Raise unless goods may be received against this order."""
        self.MACHINE.next_status(self.status, "receive_partial")

    def plan_receipt(self, quantities: dict[str, Decimal], actor: Actor) -> str:
        """Validate a receipt without changing anything.

        Returns the event the receipt will fire: ``receive_complete`` when
        every line ends up fully received, else ``receive_partial``.
        """
        self.check_receivable()
        if not quantities:
            raise ValidationError("Must receive at least one item")
        for item_id, qty in quantities.items():
            line = self._find_item(item_id)
            if qty <= ZERO:
                raise ValidationError("Received quantity must be positive")
            if qty > line.outstanding_qty:
                raise ValidationError(
                    f"Cannot receive {qty} of item {item_id}: "
                    f"only {line.outstanding_qty} outstanding"
                )

        event = "receive_complete" if self._completes_with(quantities) else "receive_partial"
        self.MACHINE.next_status(self.status, event, actor.role)
        return event

    def record_receipt(self, quantities: dict[str, Decimal], actor: Actor) -> PurchaseOrderStatus:
        """Book received quantities and move to ``partial`` or ``completed``."""
        event = self.plan_receipt(quantities, actor)
        for item_id, qty in quantities.items():
            self._find_item(item_id).receive(qty)
        return self.transition(event, actor)  # type: ignore[return-value]

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        result = Money.zero(self.currency)
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def is_fully_received(self) -> bool:
        return all(item.is_fully_received for item in self.items)

    # --- Internal helpers -----------------------------------------------------

    def _completes_with(self, quantities: dict[str, Decimal]) -> bool:
        return all(
            line.received_qty + quantities.get(line.item_id, ZERO) >= line.quantity
            for line in self.items
        )

    def _find_item(self, item_id: str) -> PurchaseOrderLine:
        for item in self.items:
            if item.item_id == item_id:
                return item
        raise ValidationError(f"Item '{item_id}' not found in purchase order {self.po_number}")
