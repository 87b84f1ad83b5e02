"""PurchaseRequisition — a department's request for items to be bought."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.actor import Actor, Role
from ims.domain.model.clock import utcnow
from ims.domain.model.state_machine import StatefulDocument, StatusMachine, transition


class RequisitionStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED = "converted"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_DECIDERS = (Role.ADMIN, Role.HOD, Role.ACCOUNTS)


@dataclass
class RequisitionLine:
    item_id: str
    quantity: Decimal
    unit: str
    purpose: str = ""
    priority: Priority = Priority.MEDIUM


@dataclass
class PurchaseRequisition(StatefulDocument):
    MACHINE = StatusMachine(
        "purchase requisition",
        [
            transition("approve", [RequisitionStatus.PENDING], RequisitionStatus.APPROVED, _DECIDERS),
            transition("reject", [RequisitionStatus.PENDING], RequisitionStatus.REJECTED, _DECIDERS),
            transition(
                "convert",
                [RequisitionStatus.APPROVED],
                RequisitionStatus.CONVERTED,
                (Role.ADMIN, Role.ACCOUNTS),
            ),
        ],
    )

    id: str | None
    pr_number: str
    requested_by: str
    department_id: str
    items: list[RequisitionLine]
    status: RequisitionStatus = RequisitionStatus.PENDING
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        pr_number: str,
        requested_by: str,
        department_id: str,
        items: list[RequisitionLine],
    ) -> PurchaseRequisition:
        if not department_id:
            raise ValidationError("Department is required")
        if not items:
            raise ValidationError("Requisition must contain at least one item")
        for line in items:
            if line.quantity <= 0:
                raise ValidationError(f"Quantity for item {line.item_id} must be positive")
        return PurchaseRequisition(
            id=None,
            pr_number=pr_number,
            requested_by=requested_by,
            department_id=department_id,
            items=list(items),
        )

    # --- State transitions ----------------------------------------------------

    def approve(self, actor: Actor) -> None:
        self.transition("approve", actor)
        self.approved_by = actor.user_id
        self.approved_at = self.updated_at

    def reject(self, actor: Actor, reason: str | None = None) -> None:
        self.transition("reject", actor)
        self.rejection_reason = reason or "No reason provided"

    def mark_converted(self, actor: Actor) -> None:
        """Record that a purchase order was raised from this requisition."""
        self.transition("convert", actor)
