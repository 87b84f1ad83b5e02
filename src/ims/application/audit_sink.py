"""Best-effort audit trail.

Audit writes happen after the primary operation and never fail it: any
error from the audit store is logged and swallowed.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from ims.domain.model.actor import Actor
from ims.domain.model.audit import AuditRecord
from ims.domain.repository.audit_repository import AuditRepository

logger = logging.getLogger(__name__)


def snapshot(value: Any) -> Any:
    """Turn a domain object into plain JSON-compatible data."""
    if is_dataclass(value) and not isinstance(value, type):
        return {k: snapshot(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {str(k): snapshot(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [snapshot(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class AuditSink:

    def __init__(self, audit_repo: AuditRepository) -> None:
        self._audit_repo = audit_repo

    def record(
        self,
        actor: Actor,
        action: str,
        entity: str,
        entity_id: str,
        before: Any = None,
        after: Any = None,
    ) -> None:
        try:
            self._audit_repo.append(
                AuditRecord(
                    user_id=actor.user_id,
                    action=action,
                    entity=entity,
                    entity_id=entity_id,
                    before=snapshot(before) if before is not None else None,
                    after=snapshot(after) if after is not None else None,
                )
            )
        except Exception:
            logger.exception("Failed to write audit record for %s %s", entity, entity_id)
