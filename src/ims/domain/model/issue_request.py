"""IssueRequest — a department's request to draw stock from stores.

The ``issue`` transition is where stock actually leaves: the application
layer runs FIFO allocation across batches before marking it issued.
"""

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


class IssueStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ISSUED = "issued"


_APPROVERS = (Role.ADMIN, Role.HOD, Role.STOREKEEPER)


@dataclass
class IssueLine:
    item_id: str
    quantity: Decimal
    unit: str = ""


@dataclass
class IssueRequest(StatefulDocument):
    MACHINE = StatusMachine(
        "issue request",
        [
            transition("approve", [IssueStatus.PENDING], IssueStatus.APPROVED, _APPROVERS),
            transition("reject", [IssueStatus.PENDING], IssueStatus.REJECTED, _APPROVERS),
            transition(
                "issue",
                [IssueStatus.APPROVED],
                IssueStatus.ISSUED,
                (Role.ADMIN, Role.STOREKEEPER),
            ),
        ],
    )

    id: str | None
    issue_number: str
    requested_by: str
    department_id: str
    items: list[IssueLine]
    purpose: str = ""
    status: IssueStatus = IssueStatus.PENDING
    approved_by: str | None = None
    approved_at: datetime | None = None
    issued_by: str | None = None
    issued_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def create(
        issue_number: str,
        requested_by: str,
        department_id: str,
        items: list[IssueLine],
        purpose: str = "",
    ) -> IssueRequest:
        if not department_id:
            raise ValidationError("Department is required")
        if not items:
            raise ValidationError("Issue request must contain at least one item")
        for line in items:
            if line.quantity <= ZERO:
                raise ValidationError(f"Quantity for item {line.item_id} must be positive")
        return IssueRequest(
            id=None,
            issue_number=issue_number,
            requested_by=requested_by,
            department_id=department_id,
            items=list(items),
            purpose=purpose,
        )

    # --- State transitions ----------------------------------------------------

    def approve(self, actor: Actor) -> None:
        self.transition("approve", actor)
        self.approved_by = actor.user_id
        self.approved_at = self.updated_at

    def reject(self, actor: Actor, reason: str | None = None) -> None:
        self.transition("reject", actor)
        self.rejection_reason = reason or "No reason provided"

    def check_issuable(self, actor: Actor) -> None:
        """Raise unless *actor* may issue this request right now."""
        self.MACHINE.next_status(self.status, "issue", actor.role)

    def mark_issued(self, actor: Actor) -> None:
        """Transition APPROVED -> ISSUED.

        Stock must already have been drawn (coordinated by the
        application handler via the stock movement service).
        """
        self.transition("issue", actor)
        self.issued_by = actor.user_id
        self.issued_at = self.updated_at

    def requested_quantities(self) -> list[tuple[str, Decimal]]:
        return [(line.item_id, line.quantity) for line in self.items]
