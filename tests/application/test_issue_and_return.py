"""Integration tests for issuing stock to departments and taking it back."""

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ims.application.approve_issue import ApproveIssueHandler
from ims.application.approve_return import ApproveReturnHandler
from ims.application.create_issue import CreateIssueHandler
from ims.application.create_return import CreateReturnHandler
from ims.application.dto import IssueItemSpec, ReturnItemSpec
from ims.application.issue_items import IssueItemsHandler
from ims.application.reject_issue import RejectIssueHandler
from ims.application.reject_return import RejectReturnHandler
from ims.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
)
from ims.domain.model.actor import Actor
from ims.domain.model.batch import ItemBatch
from ims.domain.model.issue_request import IssueStatus
from ims.domain.model.ledger import LedgerQuery, ReferenceType, TransactionType
from ims.domain.model.stock_return import ReturnStatus
from tests.fakes import (
    FlakyLedgerRepository,
    InMemoryStores,
    SlowReadDocumentRepository,
    run_in_threads,
)

HOD = Actor.of("hod-1", "hod")
STORES = Actor.of("store-1", "storekeeper")
ACCOUNTS = Actor.of("acc-1", "accounts")
T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _stock(stores: InMemoryStores, item_id: str, batch_no: str, qty: str, price: str, day: int) -> ItemBatch:
    return stores.batches.add(
        ItemBatch(
            id=None,
            item_id=item_id,
            batch_number=batch_no,
            location_id="main",
            purchase_price=Decimal(price),
            total_qty=Decimal(qty),
            available_qty=Decimal(qty),
            created_at=T0 + timedelta(days=day),
        )
    )


def _setup():
    """Rice held in two batches: B1 (5 @ 10, older) and B2 (10 @ 12)."""
    stores = InMemoryStores()
    rice = stores.add_item("RICE").id
    b1 = _stock(stores, rice, "B1", "5", "10", day=0)
    b2 = _stock(stores, rice, "B2", "10", "12", day=1)
    return stores, rice, b1, b2


def _approved_issue(stores: InMemoryStores, lines: list[tuple[str, str]]):
    issue = CreateIssueHandler(stores.issues, stores.items, stores.audit).handle(
        HOD, "kitchen", [IssueItemSpec(item_id, qty) for item_id, qty in lines], "lunch"
    )
    return ApproveIssueHandler(stores.issues, stores.audit).handle(issue.id, HOD)


def _issue_handler(stores: InMemoryStores) -> IssueItemsHandler:
    return IssueItemsHandler(stores.issues, stores.stock, stores.audit)


class TestIssueItems:

    def test_fifo_across_two_batches(self):
        stores, rice, b1, b2 = _setup()
        issue = _approved_issue(stores, [(rice, "7")])

        issued, movements = _issue_handler(stores).handle(issue.id, STORES)

        assert issued.status is IssueStatus.ISSUED
        assert issued.issued_by == "store-1"
        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("0")
        assert stores.batches.get_by_id(b2.id).available_qty == Decimal("8")
        outs = stores.ledger.query(LedgerQuery(reference_type=ReferenceType.ISSUE))
        assert [(e.batch_id, e.quantity) for e in outs] == [(b1.id, Decimal("-5")), (b2.id, Decimal("-2"))]
        assert all(e.transaction_type is TransactionType.OUT for e in outs)
        assert outs[0].notes == f"Issue: {issued.issue_number}"

    def test_shortfall_leaves_request_approved(self):
        stores, rice, b1, b2 = _setup()
        issue = _approved_issue(stores, [(rice, "16")])

        with pytest.raises(InsufficientStockError):
            _issue_handler(stores).handle(issue.id, STORES)

        assert stores.issues.get_by_id(issue.id).status is IssueStatus.APPROVED
        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("5")
        assert stores.ledger.query() == []

    def test_multi_line_is_all_or_nothing(self):
        stores, rice, b1, _ = _setup()
        dal = stores.add_item("DAL").id
        _stock(stores, dal, "D1", "1", "50", day=2)
        issue = _approved_issue(stores, [(rice, "3"), (dal, "2")])

        with pytest.raises(InsufficientStockError):
            _issue_handler(stores).handle(issue.id, STORES)

        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("5")
        assert stores.ledger.query() == []

    def test_pending_request_cannot_be_issued(self):
        stores, rice, _, _ = _setup()
        issue = CreateIssueHandler(stores.issues, stores.items, stores.audit).handle(
            HOD, "kitchen", [IssueItemSpec(rice, "1")]
        )
        with pytest.raises(InvalidStateError):
            _issue_handler(stores).handle(issue.id, STORES)

    def test_hod_cannot_issue(self):
        stores, rice, _, _ = _setup()
        issue = _approved_issue(stores, [(rice, "1")])
        with pytest.raises(PermissionDeniedError):
            _issue_handler(stores).handle(issue.id, HOD)

    def test_cannot_issue_twice(self):
        stores, rice, _, _ = _setup()
        issue = _approved_issue(stores, [(rice, "1")])
        _issue_handler(stores).handle(issue.id, STORES)
        with pytest.raises(InvalidStateError):
            _issue_handler(stores).handle(issue.id, STORES)
        assert len(stores.ledger.query()) == 1

    def test_rejected_request(self):
        stores, rice, _, _ = _setup()
        issue = CreateIssueHandler(stores.issues, stores.items, stores.audit).handle(
            HOD, "kitchen", [IssueItemSpec(rice, "1")]
        )
        rejected = RejectIssueHandler(stores.issues, stores.audit).handle(issue.id, STORES, "no need")
        assert rejected.status is IssueStatus.REJECTED
        with pytest.raises(InvalidStateError):
            ApproveIssueHandler(stores.issues, stores.audit).handle(issue.id, HOD)

    def test_audit_lists_batches_drawn(self):
        stores, rice, b1, b2 = _setup()
        issue = _approved_issue(stores, [(rice, "7")])
        _issue_handler(stores).handle(issue.id, STORES)
        record = stores.audit_repo.list_all()[-1]
        assert record.action == "ISSUE"
        assert record.before["status"] == "approved"
        assert record.after["batches"] == [
            {"batch_id": b1.id, "quantity": "5"},
            {"batch_id": b2.id, "quantity": "2"},
        ]

    def test_unknown_item_on_create(self):
        stores, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            CreateIssueHandler(stores.issues, stores.items, stores.audit).handle(
                HOD, "kitchen", [IssueItemSpec("ghost", "1")]
            )


class TestReturns:

    def _create(self, stores, item_id, batch_id, qty="4"):
        return CreateReturnHandler(stores.returns, stores.batches, stores.audit).handle(
            HOD, "kitchen", [ReturnItemSpec(item_id, batch_id, qty)], "surplus"
        )

    def test_approve_credits_batch_and_writes_return_entry(self):
        stores, rice, b1, _ = _setup()
        issue = _approved_issue(stores, [(rice, "5")])
        _issue_handler(stores).handle(issue.id, STORES)
        ret = self._create(stores, rice, b1.id)
        assert ret.return_number.endswith("-00001")

        approved = ApproveReturnHandler(stores.returns, stores.stock, stores.audit).handle(ret.id, STORES)

        assert approved.status is ReturnStatus.APPROVED
        batch = stores.batches.get_by_id(b1.id)
        assert batch.available_qty == Decimal("4")
        assert batch.total_qty == Decimal("9")
        entry = stores.ledger.query(LedgerQuery(transaction_type=TransactionType.RETURN))[0]
        assert (entry.quantity, entry.reference_id) == (Decimal("4"), ret.id)

    def test_reject_moves_no_stock(self):
        stores, rice, b1, _ = _setup()
        ret = self._create(stores, rice, b1.id)
        RejectReturnHandler(stores.returns, stores.audit).handle(ret.id, STORES, "damaged")
        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("5")
        assert stores.ledger.query() == []

    def test_cannot_approve_twice(self):
        stores, rice, b1, _ = _setup()
        ret = self._create(stores, rice, b1.id)
        handler = ApproveReturnHandler(stores.returns, stores.stock, stores.audit)
        handler.handle(ret.id, STORES)
        with pytest.raises(InvalidStateError):
            handler.handle(ret.id, STORES)
        assert len(stores.ledger.query()) == 1

    def test_accounts_cannot_approve(self):
        stores, rice, b1, _ = _setup()
        ret = self._create(stores, rice, b1.id)
        with pytest.raises(PermissionDeniedError):
            ApproveReturnHandler(stores.returns, stores.stock, stores.audit).handle(ret.id, ACCOUNTS)
        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("5")

    def test_batch_must_hold_item(self):
        stores, _, b1, _ = _setup()
        dal = stores.add_item("DAL").id
        with pytest.raises(ValidationError, match="does not hold item"):
            self._create(stores, dal, b1.id)

    def test_unknown_batch(self):
        stores, rice, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            self._create(stores, rice, "999")


class TestRacingTransitions:

    def test_racing_fulfils_draw_the_request_once(self):
        stores, rice, b1, b2 = _setup()
        stores.issues = SlowReadDocumentRepository()
        issue = _approved_issue(stores, [(rice, "4")])
        handler = _issue_handler(stores)

        results = run_in_threads(lambda: handler.handle(issue.id, STORES), 2)

        assert sum(isinstance(r, InvalidStateError) for r in results) == 1
        outs = stores.ledger.query(LedgerQuery(transaction_type=TransactionType.OUT))
        assert sum((-e.quantity for e in outs), Decimal("0")) == Decimal("4")
        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("1")
        assert stores.batches.get_by_id(b2.id).available_qty == Decimal("10")

    def test_racing_approve_and_reject_leave_one_outcome(self):
        stores, rice, _, _ = _setup()
        stores.issues = SlowReadDocumentRepository()
        issue = CreateIssueHandler(stores.issues, stores.items, stores.audit).handle(
            HOD, "kitchen", [IssueItemSpec(rice, "1")]
        )
        approve = ApproveIssueHandler(stores.issues, stores.audit)
        reject = RejectIssueHandler(stores.issues, stores.audit)
        actions = iter([lambda: approve.handle(issue.id, HOD), lambda: reject.handle(issue.id, HOD)])
        pick = threading.Lock()

        def next_action():
            with pick:
                action = next(actions)
            return action()

        results = run_in_threads(next_action, 2)

        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(winners) == 1
        assert sum(isinstance(r, InvalidStateError) for r in results) == 1
        assert stores.issues.get_by_id(issue.id).status is winners[0].status

    def test_racing_return_approvals_credit_the_batch_once(self):
        stores, rice, b1, _ = _setup()
        stores.returns = SlowReadDocumentRepository()
        ret = CreateReturnHandler(stores.returns, stores.batches, stores.audit).handle(
            HOD, "kitchen", [ReturnItemSpec(rice, b1.id, "4")], "surplus"
        )
        handler = ApproveReturnHandler(stores.returns, stores.stock, stores.audit)

        results = run_in_threads(lambda: handler.handle(ret.id, STORES), 2)

        assert sum(isinstance(r, InvalidStateError) for r in results) == 1
        batch = stores.batches.get_by_id(b1.id)
        assert (batch.available_qty, batch.total_qty) == (Decimal("9"), Decimal("9"))
        assert len(stores.ledger.query(LedgerQuery(transaction_type=TransactionType.RETURN))) == 1

    def test_concurrent_creates_get_distinct_numbers(self):
        stores, rice, _, _ = _setup()
        stores.issues = SlowReadDocumentRepository()
        handler = CreateIssueHandler(stores.issues, stores.items, stores.audit)

        results = run_in_threads(
            lambda: handler.handle(HOD, "kitchen", [IssueItemSpec(rice, "1")]), 4
        )

        assert len({r.issue_number for r in results}) == 4
        assert len({r.id for r in results}) == 4
        assert len(stores.issues.list_all()) == 4


class TestWriteFailures:

    def test_ledger_failure_during_fulfil_leaves_request_approved(self):
        ledger = FlakyLedgerRepository()
        stores = InMemoryStores(ledger=ledger)
        rice = stores.add_item("RICE").id
        b1 = _stock(stores, rice, "B1", "5", "10", day=0)
        b2 = _stock(stores, rice, "B2", "10", "12", day=1)
        issue = _approved_issue(stores, [(rice, "7")])
        ledger.fail_on(2)

        with pytest.raises(OSError):
            _issue_handler(stores).handle(issue.id, STORES)

        assert stores.issues.get_by_id(issue.id).status is IssueStatus.APPROVED
        assert stores.batches.get_by_id(b1.id).available_qty == Decimal("5")
        assert stores.batches.get_by_id(b2.id).available_qty == Decimal("10")
        net = sum((e.quantity for e in ledger.query()), Decimal("0"))
        assert net == Decimal("0")
