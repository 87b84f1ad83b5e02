"""Tests for the JSON-file repositories, against a temporary directory."""

import json
from datetime import date
from decimal import Decimal

import pytest

from ims.domain.exceptions import EntityNotFoundError, InsufficientStockError
from ims.domain.model.audit import AuditRecord
from ims.domain.model.batch import ItemBatch
from ims.domain.model.item import Item
from ims.domain.model.ledger import LedgerEntry, LedgerQuery, ReferenceType, TransactionType
from ims.domain.model.purchase_order import PurchaseOrder, PurchaseOrderLine
from ims.domain.model.value_objects import Money
from ims.infrastructure.persistence.json_audit_repository import JsonAuditRepository
from ims.infrastructure.persistence.json_batch_repository import JsonBatchRepository
from ims.infrastructure.persistence.json_item_repository import JsonItemRepository
from ims.infrastructure.persistence.json_ledger_repository import JsonLedgerRepository
from ims.infrastructure.persistence.json_purchase_order_repository import (
    JsonPurchaseOrderRepository,
)
from tests.fakes import run_in_threads


class TestJsonBatchRepository:

    def test_creates_file_and_assigns_ids(self, tmp_path):
        repo = JsonBatchRepository(tmp_path / "data" / "batches.json")
        first = repo.add(ItemBatch.receive("rice", "B1", "main", "10.50", "5", expiry_date=date(2027, 1, 1)))
        second = repo.add(ItemBatch.receive("rice", "B2", "main", "11", "5"))
        assert (first.id, second.id) == ("1", "2")

        loaded = repo.get_by_id("1")
        assert loaded.purchase_price == Decimal("10.50")
        assert loaded.expiry_date == date(2027, 1, 1)

    def test_quantities_stored_as_strings(self, tmp_path):
        path = tmp_path / "batches.json"
        JsonBatchRepository(path).add(ItemBatch.receive("rice", "B1", "main", "0.1", "0.3"))
        raw = json.loads(path.read_text())
        assert raw[0]["available_qty"] == "0.3"

    def test_adjust_available_guards_and_persists(self, tmp_path):
        repo = JsonBatchRepository(tmp_path / "batches.json")
        batch = repo.add(ItemBatch.receive("rice", "B1", "main", "10", "5"))

        repo.adjust_available(batch.id, Decimal("-2"))
        with pytest.raises(InsufficientStockError):
            repo.adjust_available(batch.id, Decimal("-4"))

        assert repo.get_by_id(batch.id).available_qty == Decimal("3")

    def test_adjust_unknown_batch(self, tmp_path):
        repo = JsonBatchRepository(tmp_path / "batches.json")
        with pytest.raises(EntityNotFoundError):
            repo.adjust_available("7", Decimal("1"))

    def test_find_available_skips_depleted(self, tmp_path):
        repo = JsonBatchRepository(tmp_path / "batches.json")
        b1 = repo.add(ItemBatch.receive("rice", "B1", "main", "10", "1"))
        repo.add(ItemBatch.receive("rice", "B2", "main", "10", "1"))
        repo.adjust_available(b1.id, Decimal("-1"))
        assert [b.batch_number for b in repo.find_available("rice")] == ["B2"]
        assert len(repo.list_batches("rice")) == 2


class TestJsonLedgerRepository:

    def test_append_and_query(self, tmp_path):
        repo = JsonLedgerRepository(tmp_path / "stock_ledger.json")
        for qty, kind in (("5", TransactionType.IN), ("-2", TransactionType.OUT)):
            repo.append(
                LedgerEntry(
                    item_id="rice",
                    transaction_type=kind,
                    quantity=Decimal(qty),
                    unit_price=Decimal("10"),
                    location_id="main",
                    user_id="u1",
                    batch_id="1",
                    reference_id="r1",
                    reference_type=ReferenceType.GRN,
                )
            )

        reopened = JsonLedgerRepository(tmp_path / "stock_ledger.json")
        assert [e.id for e in reopened.query()] == ["1", "2"]
        outs = reopened.query(LedgerQuery(transaction_type=TransactionType.OUT))
        assert outs[0].quantity == Decimal("-2")
        assert outs[0].reference_type is ReferenceType.GRN


class TestJsonDocumentRepositories:

    def test_purchase_order_codec(self, tmp_path):
        repo = JsonPurchaseOrderRepository(tmp_path / "purchase_orders.json")
        po = PurchaseOrder.create(
            "PO-2026-00001",
            "sup-1",
            [PurchaseOrderLine("rice", Decimal("10"), Money.of("40.25"), "kg")],
            expected_delivery_date=date(2026, 7, 1),
        )
        repo.save(po)
        assert po.id == "1"
        assert repo.count() == 1

        loaded = repo.get_by_id("1")
        assert loaded.total == Money.of("402.50")
        assert loaded.expected_delivery_date == date(2026, 7, 1)
        assert loaded.status is po.status

        raw = json.loads((tmp_path / "purchase_orders.json").read_text())
        assert raw[0]["total_amount"] == "402.50"

    def test_save_updates_in_place(self, tmp_path):
        repo = JsonPurchaseOrderRepository(tmp_path / "purchase_orders.json")
        po = PurchaseOrder.create("PO-1", "sup-1", [PurchaseOrderLine("rice", Decimal("1"), Money.of("1"))])
        repo.save(po)
        po.cancellation_reason = "changed"
        repo.save(po)
        assert repo.count() == 1
        assert repo.get_by_id(po.id).cancellation_reason == "changed"

    def test_locked_creation_gives_unique_ids(self, tmp_path):
        repo = JsonPurchaseOrderRepository(tmp_path / "purchase_orders.json")

        def create():
            with repo.locked():
                po = PurchaseOrder.create(
                    f"PO-{repo.count() + 1}", "sup-1", [PurchaseOrderLine("rice", Decimal("1"), Money.of("1"))]
                )
                po.id = repo.next_id()
                repo.save(po)
            return po

        results = run_in_threads(create, 4)

        assert sorted(r.id for r in results) == ["1", "2", "3", "4"]
        assert sorted(r.po_number for r in results) == ["PO-1", "PO-2", "PO-3", "PO-4"]

    def test_document_lock_is_reentrant(self, tmp_path):
        repo = JsonPurchaseOrderRepository(tmp_path / "purchase_orders.json")
        with repo.locked("1"):
            with repo.locked("1"):
                assert repo.get_by_id("1") is None


class TestJsonItemAndAudit:

    def test_item_lookup_by_code(self, tmp_path):
        repo = JsonItemRepository(tmp_path / "items.json")
        repo.save(Item.create("RICE", "Rice", "grains", "kg", "5", "20"))
        assert repo.get_by_code("rice").reorder_level == Decimal("20")
        assert repo.get_by_code("dal") is None

    def test_audit_round_trip(self, tmp_path):
        repo = JsonAuditRepository(tmp_path / "audit_logs.json")
        repo.append(AuditRecord("u1", "CREATE", "item", "1", after={"code": "RICE"}))
        record = repo.list_all()[0]
        assert record.id == "1"
        assert record.after == {"code": "RICE"}
