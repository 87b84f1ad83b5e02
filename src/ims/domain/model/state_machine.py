"""Shared lifecycle machinery for procurement and stock documents.

Every document type (PR, PO, GRN, Issue, Return) has the same shape: a
status, a table of legal transitions gated by current status and caller
role, and side effects that the application layer runs once the
transition has been accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterable

from ims.domain.exceptions import (
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
)
from ims.domain.model.actor import Actor, Role
from ims.domain.model.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    event: str
    sources: frozenset[Enum]
    target: Enum
    roles: frozenset[Role] = frozenset()  # empty: any role


def transition(
    event: str,
    sources: Iterable[Enum],
    target: Enum,
    roles: Iterable[Role] = (),
) -> Transition:
    return Transition(event, frozenset(sources), target, frozenset(roles))


class StatusMachine:
    """A transition table for one document type."""

    def __init__(self, document_type: str, transitions: Iterable[Transition]) -> None:
        self.document_type = document_type
        self._transitions: dict[str, Transition] = {}
        for t in transitions:
            if t.event in self._transitions:
                raise ValueError(f"Duplicate event '{t.event}' for {document_type}")
            self._transitions[t.event] = t

    def next_status(self, current: Enum, event: str, role: Role | None = None) -> Enum:
        """Return the status *event* leads to from *current*, or raise."""
        t = self._transitions.get(event)
        if t is None:
            raise ValidationError(f"Unknown {self.document_type} event '{event}'")
        if role is not None and t.roles and role not in t.roles:
            raise PermissionDeniedError(
                f"Role '{role.value}' may not {event} a {self.document_type}"
            )
        if current not in t.sources:
            raise InvalidStateError(
                f"Cannot {event} {self.document_type} in {current.value} status"
            )
        return t.target

    def allowed_events(self, current: Enum) -> list[str]:
        return [e for e, t in self._transitions.items() if current in t.sources]


class StatefulDocument:
    """Mixin for dataclass documents with ``status`` and ``updated_at``."""

    MACHINE: ClassVar[StatusMachine]

    def transition(self, event: str, actor: Actor) -> Enum:
        previous = self.status  # type: ignore[attr-defined]
        new_status = self.MACHINE.next_status(previous, event, actor.role)
        self.status = new_status  # type: ignore[attr-defined]
        self.updated_at = utcnow()  # type: ignore[attr-defined]
        logger.info(
            "%s %s: %s -> %s by %s",
            self.MACHINE.document_type,
            getattr(self, "id", None),
            previous.value,
            new_status.value,
            actor.user_id,
        )
        return new_status

    def can(self, event: str) -> bool:
        return event in self.MACHINE.allowed_events(self.status)  # type: ignore[attr-defined]
