"""StockReturn — items handed back to stores against specific batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.actor import Actor, Role
from ims.domain.model.clock import utcnow
from ims.domain.model.state_machine import StatefulDocument, StatusMachine, transition
from ims.domain.model.value_objects import ZERO


class ReturnStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_DECIDERS = (Role.ADMIN, Role.STOREKEEPER)


@dataclass
class ReturnLine:
    item_id: str
    batch_id: str
    quantity: Decimal
    unit: str = ""


@dataclass
class StockReturn(StatefulDocument):
    MACHINE = StatusMachine(
        "return",
        [
            transition("approve", [ReturnStatus.PENDING], ReturnStatus.APPROVED, _DECIDERS),
            transition("reject", [ReturnStatus.PENDING], ReturnStatus.REJECTED, _DECIDERS),
        ],
    )

    id: str | None
    return_number: str
    returned_by: str
    department_id: str
    items: list[ReturnLine]
    reason: str = ""
    issue_id: str | None = None
    status: ReturnStatus = ReturnStatus.PENDING
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        return_number: str,
        returned_by: str,
        department_id: str,
        items: list[ReturnLine],
        reason: str,
        issue_id: str | None = None,
    ) -> StockReturn:
        if not department_id:
            raise ValidationError("Department is required")
        if not items:
            raise ValidationError("Return must contain at least one item")
        for line in items:
            if line.quantity <= ZERO:
                raise ValidationError(f"Quantity for item {line.item_id} must be positive")
            if not line.batch_id:
                raise ValidationError(f"Batch is required for returned item {line.item_id}")
        return StockReturn(
            id=None,
            return_number=return_number,
            returned_by=returned_by,
            department_id=department_id,
            items=list(items),
            reason=reason,
            issue_id=issue_id,
        )

    def check_approvable(self, actor: Actor) -> None:
        self.MACHINE.next_status(self.status, "approve", actor.role)

    def approve(self, actor: Actor) -> None:
        self.transition("approve", actor)
        self.approved_by = actor.user_id
        self.approved_at = self.updated_at

    def reject(self, actor: Actor, reason: str | None = None) -> None:
        self.transition("reject", actor)
        self.rejection_reason = reason or "No reason provided"
