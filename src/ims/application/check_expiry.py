"""Application service: Expiry Check use case (query)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from ims.domain.exceptions import ValidationError
from ims.domain.model.batch import ItemBatch
from ims.domain.model.clock import utcnow
from ims.domain.model.value_objects import ZERO
from ims.domain.repository.batch_repository import BatchRepository


@dataclass(frozen=True)
class ExpiringBatchDTO:
    batch_id: str
    batch_number: str
    item_id: str
    location_id: str
    expiry_date: date
    available_qty: Decimal
    days: int  # until expiry, or since expiry for expired batches


@dataclass(frozen=True)
class ExpiryReportDTO:
    days: int
    expiring: list[ExpiringBatchDTO] = field(default_factory=list)
    expired: list[ExpiringBatchDTO] = field(default_factory=list)


class CheckExpiryHandler:

    def __init__(self, batch_repo: BatchRepository, default_days: int = 30) -> None:
        self._batch_repo = batch_repo
        self._default_days = default_days

    def handle(self, days: int | None = None, today: date | None = None) -> ExpiryReportDTO:
        """Batches with stock that expire within *days*, and those already expired."""
        window = self._default_days if days is None else days
        if window < 0:
            raise ValidationError("Expiry window cannot be negative")
        today = today or utcnow().date()
        cutoff = today + timedelta(days=window)

        expiring: list[ExpiringBatchDTO] = []
        expired: list[ExpiringBatchDTO] = []
        for batch in self._batch_repo.list_batches():
            if batch.expiry_date is None or batch.available_qty <= ZERO:
                continue
            if batch.is_expired(today):
                expired.append(self._to_dto(batch, (today - batch.expiry_date).days))
            elif batch.expiry_date <= cutoff:
                expiring.append(self._to_dto(batch, (batch.expiry_date - today).days))

        return ExpiryReportDTO(
            days=window,
            expiring=sorted(expiring, key=lambda b: b.expiry_date),
            expired=sorted(expired, key=lambda b: b.expiry_date),
        )

    @staticmethod
    def _to_dto(batch: ItemBatch, days: int) -> ExpiringBatchDTO:
        return ExpiringBatchDTO(
            batch_id=batch.id,  # type: ignore[arg-type]
            batch_number=batch.batch_number,
            item_id=batch.item_id,
            location_id=batch.location_id,
            expiry_date=batch.expiry_date,  # type: ignore[arg-type]
            available_qty=batch.available_qty,
            days=days,
        )
