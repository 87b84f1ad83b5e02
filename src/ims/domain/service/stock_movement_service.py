"""Domain service: stock movements.

Every change to a batch quantity goes through here so that it is paired
with exactly one ledger entry describing the same delta.  No batch moves
without a ledger trace, and no ledger entry is written for a batch write
that did not happen.

Each public method holds the per-item lock for the whole
read-plan-write-append sequence.  Multi-line movements use a two-phase
approach (plan everything, then write).  Each batch write is undone if
its own ledger append fails, and earlier lines of the same request are
undone by reversing movements, so a request either moves all of its
lines or none of them and the ledger always reconciles with the batches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.batch import ItemBatch
from ims.domain.model.ledger import LedgerEntry, Reference, TransactionType
from ims.domain.model.value_objects import ZERO, Quantity, to_decimal
from ims.domain.repository.batch_repository import BatchRepository
from ims.domain.repository.ledger_repository import LedgerRepository
from ims.domain.service.allocation import Allocation, allocate_fifo
from ims.domain.service.stock_locks import StockLocks

logger = logging.getLogger(__name__)

# Movements that change what was ever received into a batch, not just what is left
_MOVES_TOTAL = frozenset({TransactionType.IN, TransactionType.RETURN, TransactionType.ADJUST})


@dataclass(frozen=True)
class StockMovement:
    """One batch write and the ledger entry that records it."""

    batch: ItemBatch
    entry: LedgerEntry
    before_qty: Decimal


@dataclass(frozen=True)
class ReturnCredit:
    item_id: str
    batch_id: str
    quantity: Decimal


class StockMovementService:

    def __init__(
        self,
        batch_repo: BatchRepository,
        ledger_repo: LedgerRepository,
        locks: StockLocks | None = None,
    ) -> None:
        self._batch_repo = batch_repo
        self._ledger_repo = ledger_repo
        self._locks = locks if locks is not None else StockLocks()

    # --- Receipt --------------------------------------------------------------

    def receive(
        self,
        *,
        item_id: str,
        batch_number: str,
        location_id: str,
        purchase_price: Decimal,
        quantity: Decimal,
        actor: Actor,
        reference: Reference,
        expiry_date: date | None = None,
        notes: str | None = None,
    ) -> StockMovement:
        """Open a new batch and write its IN entry."""
        batch = ItemBatch.receive(
            item_id=item_id,
            batch_number=batch_number,
            location_id=location_id,
            purchase_price=purchase_price,
            quantity=quantity,
            expiry_date=expiry_date,
            grn_id=reference.id,
        )
        with self._locks.hold(item_id):
            stored = self._batch_repo.add(batch)
            try:
                entry = self._append(stored, TransactionType.IN, stored.total_qty, actor, reference, notes)
            except Exception:
                # Leave an empty batch rather than stock the ledger never saw
                self._batch_repo.adjust_available(stored.id, -stored.total_qty, affects_total=True)  # type: ignore[arg-type]
                raise
        logger.info(
            "Received %s of item %s into batch %s at %s",
            stored.total_qty, item_id, stored.batch_number, location_id,
        )
        return StockMovement(batch=stored, entry=entry, before_qty=ZERO)

    # --- Issue ----------------------------------------------------------------

    def issue(
        self,
        lines: list[tuple[str, Decimal]],
        *,
        actor: Actor,
        reference: Reference,
        location_id: str | None = None,
        notes: str | None = None,
    ) -> list[StockMovement]:
        """Draw every (item_id, quantity) line FIFO across its batches.

        Phase 1 plans every line against current stock and fails with
        InsufficientStockError before anything is written.  Phase 2
        writes the batches and appends one OUT entry per batch drawn.
        """
        if not lines:
            raise ValidationError("Must issue at least one item")

        with self._locks.hold(*(item_id for item_id, _ in lines)):
            plan = self._plan_issue(lines, location_id)
            movements = self._write_all(
                [(a.batch_id, -a.quantity) for a in plan],
                TransactionType.OUT, actor, reference, notes,
            )
        logger.info(
            "Issued %d line(s) from %d batch(es) for %s %s",
            len(lines), len(plan), reference.type.value, reference.id,
        )
        return movements

    def _plan_issue(
        self, lines: list[tuple[str, Decimal]], location_id: str | None
    ) -> list[Allocation]:
        drawn: dict[str, Decimal] = {}
        plan: list[Allocation] = []
        for item_id, quantity in lines:
            qty = Quantity.of(quantity).value
            # Later lines for the same item see what earlier lines already took
            batches = [
                replace(b, available_qty=b.available_qty - drawn.get(b.id, ZERO))  # type: ignore[arg-type]
                for b in self._batch_repo.find_available(item_id, location_id)
            ]
            for allocation in allocate_fifo(batches, item_id, qty):
                drawn[allocation.batch_id] = drawn.get(allocation.batch_id, ZERO) + allocation.quantity
                plan.append(allocation)
        return plan

    # --- Return ---------------------------------------------------------------

    def credit_returns(
        self,
        credits: list[ReturnCredit],
        *,
        actor: Actor,
        reference: Reference,
        notes: str | None = None,
    ) -> list[StockMovement]:
        """Put returned quantities back into the named batches.

        Both available and total quantity grow; one RETURN entry per line.
        """
        if not credits:
            raise ValidationError("Must return at least one item")

        for credit in credits:
            Quantity.of(credit.quantity)
            batch = self._batch_repo.get_by_id(credit.batch_id)
            if batch is None:
                raise EntityNotFoundError(f"Batch not found: {credit.batch_id}")
            if batch.item_id != credit.item_id:
                raise ValidationError(
                    f"Batch {batch.batch_number} does not hold item {credit.item_id}"
                )

        with self._locks.hold(*(c.item_id for c in credits)):
            movements = self._write_all(
                [(c.batch_id, c.quantity) for c in credits],
                TransactionType.RETURN, actor, reference, notes,
            )
        logger.info("Returned %d line(s) for %s %s", len(credits), reference.type.value, reference.id)
        return movements

    # --- Consumption ----------------------------------------------------------

    def consume(
        self,
        batch_id: str,
        quantity: Decimal,
        *,
        actor: Actor,
        reference: Reference,
        notes: str | None = None,
    ) -> StockMovement:
        """Take *quantity* out of one batch; total quantity is untouched."""
        qty = Quantity.of(quantity).value
        batch = self._require_batch(batch_id)
        with self._locks.hold(batch.item_id):
            movement = self._write(batch_id, -qty, TransactionType.CONSUMPTION, actor, reference, notes)
        logger.info("Consumed %s from batch %s", qty, movement.batch.batch_number)
        return movement

    # --- Adjustment -----------------------------------------------------------

    def adjust(
        self,
        *,
        item_id: str,
        location_id: str,
        delta: Decimal | int | float | str,
        actor: Actor,
        reference: Reference,
        batch_id: str | None = None,
        notes: str | None = None,
    ) -> StockMovement:
        """Correct a batch by a signed *delta* (stock count, damage, found stock).

        Without *batch_id* the oldest batch of the item at *location_id*
        that still holds stock is adjusted.
        """
        signed = to_decimal(delta, "Adjustment quantity")
        if signed == ZERO:
            raise ValidationError("Adjustment quantity cannot be zero")

        with self._locks.hold(item_id):
            batch = self._resolve_adjustment_batch(item_id, location_id, batch_id)
            movement = self._write(batch.id, signed, TransactionType.ADJUST, actor, reference, notes)  # type: ignore[arg-type]
        logger.info(
            "Adjusted batch %s by %s (%s -> %s)",
            batch.batch_number, signed, movement.before_qty, movement.batch.available_qty,
        )
        return movement

    def _resolve_adjustment_batch(
        self, item_id: str, location_id: str, batch_id: str | None
    ) -> ItemBatch:
        if batch_id is not None:
            batch = self._require_batch(batch_id)
            if batch.item_id != item_id:
                raise ValidationError(f"Batch {batch.batch_number} does not hold item {item_id}")
            return batch
        candidates = self._batch_repo.find_available(item_id, location_id)
        if not candidates:
            raise EntityNotFoundError("No batch found for adjustment")
        return candidates[0]

    # --- Reversal -------------------------------------------------------------

    def reverse(
        self, movements: list[StockMovement], *, actor: Actor, reference: Reference
    ) -> None:
        """Undo completed movements, newest first.

        The ledger is append-only, so each undo is a new entry of the same
        type with the opposite sign.  A reversal that cannot be written is
        logged and skipped; the original movement and its entry then both
        stand, and the ledger still reconciles.
        """
        for movement in reversed(movements):
            entry = movement.entry
            with self._locks.hold(entry.item_id):
                try:
                    self._write(
                        entry.batch_id,  # type: ignore[arg-type]
                        -entry.quantity,
                        entry.transaction_type,
                        actor,
                        reference,
                        f"Reversal of entry {entry.id}",
                    )
                except Exception:
                    logger.exception(
                        "Could not reverse ledger entry %s on batch %s", entry.id, entry.batch_id
                    )

    # --- Internal helpers -----------------------------------------------------

    def _require_batch(self, batch_id: str) -> ItemBatch:
        batch = self._batch_repo.get_by_id(batch_id)
        if batch is None:
            raise EntityNotFoundError(f"Batch not found: {batch_id}")
        return batch

    def _write(
        self,
        batch_id: str,
        delta: Decimal,
        transaction_type: TransactionType,
        actor: Actor,
        reference: Reference,
        notes: str | None,
    ) -> StockMovement:
        """Apply one batch delta and append its ledger entry, or do neither."""
        affects_total = transaction_type in _MOVES_TOTAL
        updated = self._batch_repo.adjust_available(batch_id, delta, affects_total=affects_total)
        try:
            entry = self._append(updated, transaction_type, delta, actor, reference, notes)
        except Exception:
            logger.warning("Ledger append failed; undoing write of %s on batch %s", delta, batch_id)
            self._batch_repo.adjust_available(batch_id, -delta, affects_total=affects_total)
            raise
        return StockMovement(batch=updated, entry=entry, before_qty=updated.available_qty - delta)

    def _write_all(
        self,
        deltas: list[tuple[str, Decimal]],
        transaction_type: TransactionType,
        actor: Actor,
        reference: Reference,
        notes: str | None,
    ) -> list[StockMovement]:
        """Write every delta or none of them."""
        movements: list[StockMovement] = []
        try:
            for batch_id, delta in deltas:
                movements.append(
                    self._write(batch_id, delta, transaction_type, actor, reference, notes)
                )
        except Exception:
            logger.warning("Stock write failed; reversing %d completed movement(s)", len(movements))
            self.reverse(movements, actor=actor, reference=reference)
            raise
        return movements

    def _append(
        self,
        batch: ItemBatch,
        transaction_type: TransactionType,
        quantity: Decimal,
        actor: Actor,
        reference: Reference,
        notes: str | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            item_id=batch.item_id,
            batch_id=batch.id,
            transaction_type=transaction_type,
            quantity=quantity,
            unit_price=batch.purchase_price,
            location_id=batch.location_id,
            user_id=actor.user_id,
            reference_id=reference.id,
            reference_type=reference.type,
            notes=notes,
        )
        entry_id = self._ledger_repo.append(entry)
        return replace(entry, id=entry_id)
