"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Repositories and the
stock movement service are built once per container so that every
handler shares the same stores and the same per-item locks.
"""

from __future__ import annotations

from functools import cached_property

from ims.application.add_item import AddItemHandler
from ims.application.adjust_stock import AdjustStockHandler
from ims.application.approve_issue import ApproveIssueHandler
from ims.application.approve_purchase_order import ApprovePurchaseOrderHandler
from ims.application.approve_requisition import ApproveRequisitionHandler
from ims.application.approve_return import ApproveReturnHandler
from ims.application.audit_query import AuditQueryHandler
from ims.application.audit_sink import AuditSink
from ims.application.cancel_purchase_order import CancelPurchaseOrderHandler
from ims.application.check_expiry import CheckExpiryHandler
from ims.application.check_reorder import CheckReorderHandler
from ims.application.create_grn import CreateGrnHandler
from ims.application.create_issue import CreateIssueHandler
from ims.application.create_purchase_order import CreatePurchaseOrderHandler
from ims.application.create_requisition import CreateRequisitionHandler
from ims.application.create_return import CreateReturnHandler
from ims.application.issue_items import IssueItemsHandler
from ims.application.ledger_query import LedgerQueryHandler
from ims.application.record_consumption import RecordConsumptionHandler
from ims.application.reject_issue import RejectIssueHandler
from ims.application.reject_requisition import RejectRequisitionHandler
from ims.application.reject_return import RejectReturnHandler
from ims.application.send_purchase_order import SendPurchaseOrderHandler
from ims.application.stock_report import StockReportHandler
from ims.application.valuation_report import ValuationReportHandler
from ims.application.variance_report import VarianceReportHandler
from ims.domain.service.stock_locks import StockLocks
from ims.domain.service.stock_movement_service import StockMovementService
from ims.infrastructure.config import Settings, get_settings
from ims.infrastructure.persistence.json_audit_repository import JsonAuditRepository
from ims.infrastructure.persistence.json_batch_repository import JsonBatchRepository
from ims.infrastructure.persistence.json_consumption_repository import JsonConsumptionRepository
from ims.infrastructure.persistence.json_grn_repository import JsonGrnRepository
from ims.infrastructure.persistence.json_issue_repository import JsonIssueRepository
from ims.infrastructure.persistence.json_item_repository import JsonItemRepository
from ims.infrastructure.persistence.json_ledger_repository import JsonLedgerRepository
from ims.infrastructure.persistence.json_purchase_order_repository import (
    JsonPurchaseOrderRepository,
)
from ims.infrastructure.persistence.json_requisition_repository import JsonRequisitionRepository
from ims.infrastructure.persistence.json_return_repository import JsonReturnRepository


class Container:
    """Lazily built repositories and handlers for one data directory."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._data_dir = self.settings.data_dir

    # --- Repositories ---------------------------------------------------------

    @cached_property
    def item_repo(self) -> JsonItemRepository:
        return JsonItemRepository(self._data_dir / "items.json")

    @cached_property
    def batch_repo(self) -> JsonBatchRepository:
        return JsonBatchRepository(self._data_dir / "batches.json")

    @cached_property
    def ledger_repo(self) -> JsonLedgerRepository:
        return JsonLedgerRepository(self._data_dir / "stock_ledger.json")

    @cached_property
    def requisition_repo(self) -> JsonRequisitionRepository:
        return JsonRequisitionRepository(self._data_dir / "requisitions.json")

    @cached_property
    def po_repo(self) -> JsonPurchaseOrderRepository:
        return JsonPurchaseOrderRepository(self._data_dir / "purchase_orders.json")

    @cached_property
    def grn_repo(self) -> JsonGrnRepository:
        return JsonGrnRepository(self._data_dir / "grns.json")

    @cached_property
    def issue_repo(self) -> JsonIssueRepository:
        return JsonIssueRepository(self._data_dir / "issues.json")

    @cached_property
    def return_repo(self) -> JsonReturnRepository:
        return JsonReturnRepository(self._data_dir / "returns.json")

    @cached_property
    def consumption_repo(self) -> JsonConsumptionRepository:
        return JsonConsumptionRepository(self._data_dir / "consumption_logs.json")

    @cached_property
    def audit_repo(self) -> JsonAuditRepository:
        return JsonAuditRepository(self._data_dir / "audit_logs.json")

    # --- Services -------------------------------------------------------------

    @cached_property
    def stock(self) -> StockMovementService:
        return StockMovementService(self.batch_repo, self.ledger_repo, StockLocks())

    @cached_property
    def audit(self) -> AuditSink:
        return AuditSink(self.audit_repo)

    # --- Handlers -------------------------------------------------------------

    def add_item(self) -> AddItemHandler:
        return AddItemHandler(self.item_repo, self.audit)

    def create_requisition(self) -> CreateRequisitionHandler:
        return CreateRequisitionHandler(self.requisition_repo, self.item_repo, self.audit)

    def approve_requisition(self) -> ApproveRequisitionHandler:
        return ApproveRequisitionHandler(self.requisition_repo, self.audit)

    def reject_requisition(self) -> RejectRequisitionHandler:
        return RejectRequisitionHandler(self.requisition_repo, self.audit)

    def create_purchase_order(self) -> CreatePurchaseOrderHandler:
        return CreatePurchaseOrderHandler(
            self.po_repo, self.requisition_repo, self.item_repo, self.audit, self.settings.currency
        )

    def approve_purchase_order(self) -> ApprovePurchaseOrderHandler:
        return ApprovePurchaseOrderHandler(self.po_repo, self.audit)

    def send_purchase_order(self) -> SendPurchaseOrderHandler:
        return SendPurchaseOrderHandler(self.po_repo, self.audit)

    def cancel_purchase_order(self) -> CancelPurchaseOrderHandler:
        return CancelPurchaseOrderHandler(self.po_repo, self.audit)

    def create_grn(self) -> CreateGrnHandler:
        return CreateGrnHandler(self.grn_repo, self.po_repo, self.stock, self.audit)

    def create_issue(self) -> CreateIssueHandler:
        return CreateIssueHandler(self.issue_repo, self.item_repo, self.audit)

    def approve_issue(self) -> ApproveIssueHandler:
        return ApproveIssueHandler(self.issue_repo, self.audit)

    def reject_issue(self) -> RejectIssueHandler:
        return RejectIssueHandler(self.issue_repo, self.audit)

    def issue_items(self) -> IssueItemsHandler:
        return IssueItemsHandler(self.issue_repo, self.stock, self.audit)

    def create_return(self) -> CreateReturnHandler:
        return CreateReturnHandler(self.return_repo, self.batch_repo, self.audit)

    def approve_return(self) -> ApproveReturnHandler:
        return ApproveReturnHandler(self.return_repo, self.stock, self.audit)

    def reject_return(self) -> RejectReturnHandler:
        return RejectReturnHandler(self.return_repo, self.audit)

    def record_consumption(self) -> RecordConsumptionHandler:
        return RecordConsumptionHandler(self.consumption_repo, self.batch_repo, self.stock, self.audit)

    def adjust_stock(self) -> AdjustStockHandler:
        return AdjustStockHandler(self.stock, self.audit)

    def stock_report(self) -> StockReportHandler:
        return StockReportHandler(self.batch_repo, self.item_repo)

    def valuation_report(self) -> ValuationReportHandler:
        return ValuationReportHandler(self.batch_repo, self.settings.default_valuation_method)

    def ledger_query(self) -> LedgerQueryHandler:
        return LedgerQueryHandler(self.ledger_repo)

    def check_reorder(self) -> CheckReorderHandler:
        return CheckReorderHandler(self.item_repo, self.batch_repo)

    def check_expiry(self) -> CheckExpiryHandler:
        return CheckExpiryHandler(self.batch_repo, self.settings.expiry_window_days)

    def variance_report(self) -> VarianceReportHandler:
        return VarianceReportHandler(self.consumption_repo)

    def audit_query(self) -> AuditQueryHandler:
        return AuditQueryHandler(self.audit_repo)
