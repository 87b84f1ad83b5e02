"""AuditRecord — before/after snapshot of a mutating operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ims.domain.model.clock import utcnow


@dataclass(frozen=True)
class AuditRecord:
    user_id: str
    action: str
    entity: str
    entity_id: str
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    timestamp: datetime = field(default_factory=utcnow)
    id: str | None = None
