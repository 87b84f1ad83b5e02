"""Tests for the audit trail and the item catalog."""

from decimal import Decimal

import pytest

from ims.application.add_item import AddItemHandler
from ims.application.adjust_stock import AdjustStockHandler
from ims.application.audit_query import AuditQueryHandler
from ims.application.audit_sink import AuditSink, snapshot
from ims.application.dto import ErrorResult
from ims.domain.exceptions import InsufficientStockError, ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.batch import ItemBatch
from ims.domain.model.ledger import TransactionType
from tests.fakes import BrokenAuditRepository, InMemoryStores

ADMIN = Actor.of("admin-1", "admin")
STORES = Actor.of("store-1", "storekeeper")


class TestAddItem:

    def test_adds_and_audits(self):
        stores = InMemoryStores()
        item = AddItemHandler(stores.items, stores.audit).handle(
            ADMIN, "OIL-1L", "Sunflower oil", "grocery", "ltr", reorder_level="12"
        )
        assert item.id is not None
        assert item.reorder_level == Decimal("12")
        record = stores.audit_repo.list_all()[0]
        assert (record.action, record.entity, record.user_id) == ("CREATE", "item", "admin-1")
        assert record.before is None

    def test_duplicate_code_rejected(self):
        stores = InMemoryStores()
        handler = AddItemHandler(stores.items, stores.audit)
        handler.handle(ADMIN, "OIL-1L", "Oil", "grocery", "ltr")
        with pytest.raises(ValidationError, match="already exists"):
            handler.handle(ADMIN, "oil-1l", "Other oil", "grocery", "ltr")

    def test_blank_name_rejected(self):
        stores = InMemoryStores()
        with pytest.raises(ValidationError, match="name is required"):
            AddItemHandler(stores.items, stores.audit).handle(ADMIN, "X", " ", "c", "u")


class TestAuditSink:

    def test_failing_audit_store_does_not_fail_the_operation(self):
        stores = InMemoryStores(audit_repo=BrokenAuditRepository())
        rice = stores.add_item("RICE").id
        stores.batches.add(ItemBatch.receive(rice, "B1", "main", "10", "5"))

        result = AdjustStockHandler(stores.stock, stores.audit).handle(rice, "main", "-1", "spill", STORES)

        assert result.after_qty == Decimal("4")
        assert stores.ledger.query()[0].transaction_type is TransactionType.ADJUST

    def test_failure_is_logged(self, caplog):
        sink = AuditSink(BrokenAuditRepository())
        sink.record(ADMIN, "CREATE", "item", "1", after={"code": "X"})
        assert "Failed to write audit record for item 1" in caplog.text

    def test_snapshot_makes_plain_data(self):
        batch = ItemBatch.receive("rice", "B1", "main", "10", "5")
        data = snapshot(batch)
        assert data["available_qty"] == "5"
        assert isinstance(data["created_at"], str)


class TestAuditQuery:

    def test_filters_by_entity_and_user(self):
        stores = InMemoryStores()
        handler = AddItemHandler(stores.items, stores.audit)
        first = handler.handle(ADMIN, "A", "Apple", "fruit", "kg")
        handler.handle(STORES, "B", "Banana", "fruit", "kg")

        query = AuditQueryHandler(stores.audit_repo)
        assert len(query.handle(entity="item")) == 2
        assert [r.entity_id for r in query.handle(user_id="admin-1")] == [first.id]
        assert query.handle(entity="purchase_order") == []


class TestErrorResult:

    def test_from_exception(self):
        result = ErrorResult.from_exception(InsufficientStockError("not enough rice"))
        assert (result.kind, result.message) == ("InsufficientStock", "not enough rice")
