"""Integration tests for consumption logging and manual stock adjustment."""

from decimal import Decimal

import pytest

from ims.application.adjust_stock import AdjustStockHandler
from ims.application.record_consumption import RecordConsumptionHandler
from ims.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from ims.domain.model.actor import Actor
from ims.domain.model.batch import ItemBatch
from ims.domain.model.ledger import ReferenceType, TransactionType
from tests.fakes import InMemoryStores, SlowReadDocumentRepository, run_in_threads

STORES = Actor.of("store-1", "storekeeper")


def _setup(qty: str = "10") -> tuple[InMemoryStores, str, ItemBatch]:
    stores = InMemoryStores()
    rice = stores.add_item("RICE").id
    batch = stores.batches.add(ItemBatch.receive(rice, "B1", "main", "40", qty))
    return stores, rice, batch


def _consume(stores: InMemoryStores) -> RecordConsumptionHandler:
    return RecordConsumptionHandler(stores.consumption, stores.batches, stores.stock, stores.audit)


class TestRecordConsumption:

    def test_variance_and_stock_draw(self):
        stores, _, batch = _setup()

        log = _consume(stores).handle(batch.id, "5", "3", STORES, department_id="kitchen")

        assert log.variance == Decimal("2")
        saved = stores.batches.get_by_id(batch.id)
        assert (saved.available_qty, saved.total_qty) == (Decimal("7"), Decimal("10"))
        entry = stores.ledger.query()[0]
        assert entry.transaction_type is TransactionType.CONSUMPTION
        assert entry.quantity == Decimal("-3")
        assert (entry.reference_type, entry.reference_id) == (ReferenceType.CONSUMPTION, log.id)
        assert stores.consumption.get_by_id(log.id).actual_qty == Decimal("3")

    def test_overuse_gives_negative_variance(self):
        stores, _, batch = _setup()
        log = _consume(stores).handle(batch.id, "2", "3", STORES)
        assert log.variance == Decimal("-1")

    def test_actual_over_available_rejected_and_nothing_saved(self):
        stores, _, batch = _setup("2")
        with pytest.raises(InsufficientStockError):
            _consume(stores).handle(batch.id, "3", "3", STORES)
        assert stores.consumption.list_all() == []
        assert stores.ledger.query() == []

    def test_concurrent_logs_get_distinct_ids(self):
        stores, _, batch = _setup()
        stores.consumption = SlowReadDocumentRepository()
        handler = _consume(stores)

        logs = run_in_threads(lambda: handler.handle(batch.id, "1", "1", STORES), 3)

        assert len({log.id for log in logs}) == 3
        assert len(stores.consumption.list_all()) == 3
        refs = {e.reference_id for e in stores.ledger.query()}
        assert refs == {log.id for log in logs}
        assert stores.batches.get_by_id(batch.id).available_qty == Decimal("7")

    def test_zero_actual_logs_without_moving_stock(self):
        stores, _, batch = _setup()
        log = _consume(stores).handle(batch.id, "4", "0", STORES)
        assert log.variance == Decimal("4")
        assert stores.consumption.get_by_id(log.id) is not None
        assert stores.batches.get_by_id(batch.id).available_qty == Decimal("10")
        assert stores.ledger.query() == []
        assert stores.batches.writes == 0

    def test_unknown_batch(self):
        stores, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            _consume(stores).handle("404", "1", "1", STORES)

    def test_item_mismatch_rejected(self):
        stores, _, batch = _setup()
        with pytest.raises(ValidationError, match="does not hold item"):
            _consume(stores).handle(batch.id, "1", "1", STORES, item_id="other")

    def test_theoretical_must_be_positive(self):
        stores, _, batch = _setup()
        with pytest.raises(ValidationError, match="Theoretical"):
            _consume(stores).handle(batch.id, "0", "1", STORES)


class TestAdjustStock:

    def test_shrink_returns_before_and_after(self):
        stores, rice, batch = _setup()
        handler = AdjustStockHandler(stores.stock, stores.audit)

        result = handler.handle(rice, "main", "-3", "physical count", STORES)

        assert result.batch_id == batch.id
        assert (result.before_qty, result.after_qty) == (Decimal("10"), Decimal("7"))
        entry = stores.ledger.query()[0]
        assert entry.transaction_type is TransactionType.ADJUST
        assert entry.quantity == Decimal("-3")
        assert entry.notes == "physical count"
        assert stores.batches.get_by_id(batch.id).total_qty == Decimal("7")

    def test_found_stock_grows_the_batch(self):
        stores, rice, batch = _setup()
        result = AdjustStockHandler(stores.stock, stores.audit).handle(
            rice, "main", "2", "found in back store", STORES, batch_id=batch.id
        )
        assert result.after_qty == Decimal("12")

    def test_shrink_below_zero_rejected(self):
        stores, rice, batch = _setup("2")
        with pytest.raises(InsufficientStockError):
            AdjustStockHandler(stores.stock, stores.audit).handle(rice, "main", "-3", "damaged", STORES)
        assert stores.batches.get_by_id(batch.id).available_qty == Decimal("2")
        assert stores.ledger.query() == []

    def test_reason_required(self):
        stores, rice, _ = _setup()
        with pytest.raises(ValidationError, match="reason"):
            AdjustStockHandler(stores.stock, stores.audit).handle(rice, "main", "-1", "  ", STORES)

    def test_no_batch_at_location(self):
        stores, rice, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            AdjustStockHandler(stores.stock, stores.audit).handle(rice, "annex", "1", "count", STORES)

    def test_audited_against_the_batch(self):
        stores, rice, batch = _setup()
        AdjustStockHandler(stores.stock, stores.audit).handle(rice, "main", "-1", "spill", STORES)
        record = stores.audit_repo.list_all()[-1]
        assert (record.action, record.entity, record.entity_id) == ("STOCK_ADJUST", "item_batch", batch.id)
        assert record.after == {"available_qty": "9", "reason": "spill"}
