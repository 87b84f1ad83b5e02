"""Unit tests for the document status machines and their role guards."""

from decimal import Decimal

import pytest

from ims.domain.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from ims.domain.model.actor import Actor
from ims.domain.model.goods_receipt import GoodsReceiptNote, GrnLine, GrnStatus
from ims.domain.model.issue_request import IssueLine, IssueRequest, IssueStatus
from ims.domain.model.purchase_order import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)
from ims.domain.model.requisition import PurchaseRequisition, RequisitionLine, RequisitionStatus
from ims.domain.model.stock_return import ReturnLine, ReturnStatus, StockReturn
from ims.domain.model.value_objects import Money

ADMIN = Actor.of("admin-1", "admin")
HOD = Actor.of("hod-1", "hod")
STORES = Actor.of("store-1", "storekeeper")
ACCOUNTS = Actor.of("acc-1", "accounts")


def _pr() -> PurchaseRequisition:
    return PurchaseRequisition.create(
        "PR-2026-00001", "u1", "kitchen", [RequisitionLine("i1", Decimal("5"), "kg")]
    )


def _po(*lines: tuple[str, str]) -> PurchaseOrder:
    items = [
        PurchaseOrderLine(item_id=i, quantity=Decimal(q), unit_price=Money.of("10"))
        for i, q in (lines or (("i1", "10"),))
    ]
    po = PurchaseOrder.create("PO-2026-00001", "sup-1", items)
    po.id = "1"
    return po


def _sent_po(*lines: tuple[str, str]) -> PurchaseOrder:
    po = _po(*lines)
    po.approve(ACCOUNTS)
    po.send(ACCOUNTS)
    return po


# ── Purchase requisition ─────────────────────────────────────────────────────


class TestRequisition:

    def test_hod_approves(self):
        pr = _pr()
        pr.approve(HOD)
        assert pr.status is RequisitionStatus.APPROVED
        assert pr.approved_by == "hod-1"
        assert pr.approved_at is not None

    def test_storekeeper_cannot_approve(self):
        pr = _pr()
        with pytest.raises(PermissionDeniedError):
            pr.approve(STORES)
        assert pr.status is RequisitionStatus.PENDING

    def test_reject_records_reason(self):
        pr = _pr()
        pr.reject(ADMIN, "over budget")
        assert pr.status is RequisitionStatus.REJECTED
        assert pr.rejection_reason == "over budget"

    def test_only_approved_can_convert(self):
        pr = _pr()
        with pytest.raises(InvalidStateError):
            pr.mark_converted(ACCOUNTS)
        pr.approve(ADMIN)
        pr.mark_converted(ACCOUNTS)
        assert pr.status is RequisitionStatus.CONVERTED

    def test_rejected_cannot_be_approved(self):
        pr = _pr()
        pr.reject(ADMIN)
        with pytest.raises(InvalidStateError):
            pr.approve(ADMIN)

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            PurchaseRequisition.create("PR-1", "u1", "kitchen", [])


# ── Purchase order ───────────────────────────────────────────────────────────


class TestPurchaseOrder:

    def test_total_sums_line_totals(self):
        po = _po(("i1", "3"), ("i2", "2"))
        assert po.total == Money.of("50")

    def test_duplicate_items_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            _po(("i1", "1"), ("i1", "2"))

    def test_happy_path_to_sent(self):
        po = _sent_po()
        assert po.status is PurchaseOrderStatus.SENT
        assert po.sent_at is not None

    def test_cannot_send_draft(self):
        po = _po()
        with pytest.raises(InvalidStateError):
            po.send(ADMIN)

    def test_hod_cannot_approve(self):
        with pytest.raises(PermissionDeniedError):
            _po().approve(HOD)

    def test_draft_not_receivable(self):
        with pytest.raises(InvalidStateError):
            _po().check_receivable()

    def test_partial_then_complete(self):
        po = _sent_po(("i1", "10"), ("i2", "4"))
        assert po.record_receipt({"i1": Decimal("10")}, STORES) is PurchaseOrderStatus.PARTIAL
        assert po.record_receipt({"i2": Decimal("4")}, STORES) is PurchaseOrderStatus.COMPLETED
        assert po.is_fully_received

    def test_completion_counts_quantity_not_lines(self):
        po = _sent_po(("i1", "10"))
        po.record_receipt({"i1": Decimal("6")}, STORES)
        assert po.status is PurchaseOrderStatus.PARTIAL
        po.record_receipt({"i1": Decimal("4")}, STORES)
        assert po.status is PurchaseOrderStatus.COMPLETED

    def test_over_receipt_rejected(self):
        po = _sent_po(("i1", "10"))
        with pytest.raises(ValidationError, match="only 10 outstanding"):
            po.plan_receipt({"i1": Decimal("11")}, STORES)

    def test_item_not_on_order_rejected(self):
        po = _sent_po(("i1", "10"))
        with pytest.raises(ValidationError, match="not found in purchase order"):
            po.plan_receipt({"other": Decimal("1")}, STORES)

    def test_plan_does_not_mutate(self):
        po = _sent_po(("i1", "10"))
        po.plan_receipt({"i1": Decimal("10")}, STORES)
        assert po.items[0].received_qty == Decimal("0")
        assert po.status is PurchaseOrderStatus.SENT

    def test_hod_cannot_receive(self):
        po = _sent_po()
        with pytest.raises(PermissionDeniedError):
            po.plan_receipt({"i1": Decimal("1")}, HOD)

    def test_cancel_from_partial(self):
        po = _sent_po(("i1", "10"))
        po.record_receipt({"i1": Decimal("2")}, STORES)
        po.cancel(ADMIN, "supplier closed")
        assert po.status is PurchaseOrderStatus.CANCELLED
        assert po.cancellation_reason == "supplier closed"

    def test_completed_cannot_be_cancelled(self):
        po = _sent_po(("i1", "1"))
        po.record_receipt({"i1": Decimal("1")}, STORES)
        with pytest.raises(InvalidStateError):
            po.cancel(ADMIN)


# ── Goods receipt ────────────────────────────────────────────────────────────


class TestGoodsReceipt:

    def _grn(self) -> GoodsReceiptNote:
        return GoodsReceiptNote.create(
            "GRN-2026-00001",
            "1",
            "sup-1",
            "store-1",
            [
                GrnLine("i1", "B1", Decimal("4"), Decimal("10"), "main"),
                GrnLine("i1", "B2", Decimal("2"), Decimal("12"), "main"),
            ],
        )

    def test_total_amount(self):
        assert self._grn().total_amount == Decimal("64")

    def test_quantities_summed_per_item(self):
        assert self._grn().received_quantities() == {"i1": Decimal("6")}

    def test_complete_records_batches(self):
        grn = self._grn()
        grn.complete(STORES, ["7", "8"])
        assert grn.status is GrnStatus.COMPLETED
        assert grn.batch_ids == ["7", "8"]

    def test_hod_cannot_complete(self):
        with pytest.raises(PermissionDeniedError):
            self._grn().check_completable(HOD)

    def test_missing_batch_number_rejected(self):
        with pytest.raises(ValidationError, match="Batch number"):
            GoodsReceiptNote.create(
                "GRN-1", "1", "s", "u", [GrnLine("i1", "", Decimal("1"), Decimal("1"), "main")]
            )


# ── Issue request ────────────────────────────────────────────────────────────


class TestIssueRequest:

    def _issue(self) -> IssueRequest:
        return IssueRequest.create("ISS-2026-00001", "u1", "kitchen", [IssueLine("i1", Decimal("2"))])

    def test_cannot_issue_pending(self):
        with pytest.raises(InvalidStateError):
            self._issue().check_issuable(STORES)

    def test_hod_approves_but_cannot_issue(self):
        issue = self._issue()
        issue.approve(HOD)
        with pytest.raises(PermissionDeniedError):
            issue.check_issuable(HOD)

    def test_mark_issued(self):
        issue = self._issue()
        issue.approve(STORES)
        issue.mark_issued(STORES)
        assert issue.status is IssueStatus.ISSUED
        assert issue.issued_by == "store-1"

    def test_accounts_cannot_approve(self):
        with pytest.raises(PermissionDeniedError):
            self._issue().approve(ACCOUNTS)

    def test_allowed_events(self):
        assert set(IssueRequest.MACHINE.allowed_events(IssueStatus.PENDING)) == {"approve", "reject"}


# ── Stock return ─────────────────────────────────────────────────────────────


class TestStockReturn:

    def _return(self) -> StockReturn:
        return StockReturn.create(
            "RET-2026-00001", "u1", "kitchen", [ReturnLine("i1", "b1", Decimal("1"))], "unused"
        )

    def test_storekeeper_approves(self):
        ret = self._return()
        ret.approve(STORES)
        assert ret.status is ReturnStatus.APPROVED

    def test_hod_cannot_approve(self):
        with pytest.raises(PermissionDeniedError):
            self._return().check_approvable(HOD)

    def test_rejected_cannot_be_approved(self):
        ret = self._return()
        ret.reject(ADMIN, "damaged")
        with pytest.raises(InvalidStateError):
            ret.approve(ADMIN)

    def test_batch_required(self):
        with pytest.raises(ValidationError, match="Batch is required"):
            StockReturn.create("RET-1", "u1", "k", [ReturnLine("i1", "", Decimal("1"))], "x")
