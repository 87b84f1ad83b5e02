"""CLI commands for requisitions, purchase orders and goods receipts."""

from __future__ import annotations

import click

from ims.application.dto import GrnItemSpec, PurchaseOrderItemSpec, RequisitionItemSpec
from ims.domain.exceptions import DomainException
from ims.infrastructure.cli.common import CliState, fail, parse_date, pass_state, split_specs

# --- Purchase requisitions ----------------------------------------------------


@click.command("create")
@click.option("--department", required=True, help="Requesting department id.")
@click.option("--items", required=True, help="Items as 'ItemId:Qty[:Priority],...'.")
@click.option("--purpose", default="", help="Why the items are needed.")
@pass_state
def pr_create(state: CliState, department: str, items: str, purpose: str) -> None:
    """Raise a purchase requisition."""
    specs = [
        RequisitionItemSpec(
            item_id=f[0],
            quantity=f[1],
            purpose=purpose,
            priority=f[2] if len(f) > 2 else "medium",
        )
        for f in split_specs(items, 2, 3, "ItemId:Qty[:Priority]")
    ]
    actor = state.actor()
    try:
        pr = state.container.create_requisition().handle(actor, department, specs)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Requisition {pr.pr_number} (#{pr.id}) created  (status={pr.status.value})")


@click.command("approve")
@click.option("--id", "pr_id", required=True, help="Requisition id.")
@pass_state
def pr_approve(state: CliState, pr_id: str) -> None:
    """Approve a pending requisition."""
    actor = state.actor()
    try:
        pr = state.container.approve_requisition().handle(pr_id, actor)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Requisition {pr.pr_number} approved.")


@click.command("reject")
@click.option("--id", "pr_id", required=True, help="Requisition id.")
@click.option("--reason", default=None, help="Rejection reason.")
@pass_state
def pr_reject(state: CliState, pr_id: str, reason: str | None) -> None:
    """Reject a pending requisition."""
    actor = state.actor()
    try:
        pr = state.container.reject_requisition().handle(pr_id, actor, reason)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Requisition {pr.pr_number} rejected: {pr.rejection_reason}")


# --- Purchase orders ----------------------------------------------------------


@click.command("create")
@click.option("--supplier", required=True, help="Supplier id.")
@click.option("--items", required=True, help="Items as 'ItemId:Qty:UnitPrice,...'.")
@click.option("--pr", "pr_id", default=None, help="Approved requisition to convert.")
@click.option("--expected", default=None, help="Expected delivery date (YYYY-MM-DD).")
@pass_state
def po_create(
    state: CliState, supplier: str, items: str, pr_id: str | None, expected: str | None
) -> None:
    """Create a purchase order."""
    specs = [
        PurchaseOrderItemSpec(item_id=f[0], quantity=f[1], unit_price=f[2])
        for f in split_specs(items, 3, 3, "ItemId:Qty:UnitPrice")
    ]
    actor = state.actor()
    try:
        po = state.container.create_purchase_order().handle(
            actor, supplier, specs, pr_id=pr_id, expected_delivery_date=parse_date(expected)
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Purchase order {po.po_number} (#{po.id}) created  (status={po.status.value})")
    click.echo()
    click.echo(f"  {'Item':<10} {'Qty':>8} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*49}")
    for line in po.items:
        click.echo(
            f"  {line.item_id:<10} {str(line.quantity):>8} "
            f"{str(line.unit_price):>14} {str(line.line_total):>14}"
        )
    click.echo(f"  {'-'*49}")
    click.echo(f"  {'Order Total':<20} {str(po.total):>29}")


def _po_transition(state: CliState, handler_name: str, po_id: str, *args) -> None:
    actor = state.actor()
    try:
        po = getattr(state.container, handler_name)().handle(po_id, actor, *args)
    except DomainException as exc:
        raise fail(exc)
    click.echo(f"Purchase order {po.po_number} is now {po.status.value}.")


@click.command("approve")
@click.option("--id", "po_id", required=True, help="Purchase order id.")
@pass_state
def po_approve(state: CliState, po_id: str) -> None:
    """Approve a draft purchase order."""
    _po_transition(state, "approve_purchase_order", po_id)


@click.command("send")
@click.option("--id", "po_id", required=True, help="Purchase order id.")
@pass_state
def po_send(state: CliState, po_id: str) -> None:
    """Mark an approved purchase order as sent to the supplier."""
    _po_transition(state, "send_purchase_order", po_id)


@click.command("cancel")
@click.option("--id", "po_id", required=True, help="Purchase order id.")
@click.option("--reason", default=None, help="Cancellation reason.")
@pass_state
def po_cancel(state: CliState, po_id: str, reason: str | None) -> None:
    """Cancel a purchase order."""
    _po_transition(state, "cancel_purchase_order", po_id, reason)


# --- Goods receipts -----------------------------------------------------------


@click.command("create")
@click.option("--po", "po_id", required=True, help="Purchase order id.")
@click.option(
    "--line",
    "lines",
    required=True,
    multiple=True,
    help="Received batch as 'ItemId:BatchNo:Qty:UnitPrice:Location[:Expiry]'. Repeatable.",
)
@click.option("--notes", default=None, help="Receipt notes.")
@pass_state
def grn_create(state: CliState, po_id: str, lines: tuple[str, ...], notes: str | None) -> None:
    """Receive goods against a sent purchase order."""
    fmt = "ItemId:BatchNo:Qty:UnitPrice:Location[:Expiry]"
    specs: list[GrnItemSpec] = []
    for raw in lines:
        for f in split_specs(raw, 5, 6, fmt):
            specs.append(
                GrnItemSpec(
                    item_id=f[0],
                    batch_number=f[1],
                    quantity=f[2],
                    unit_price=f[3],
                    location_id=f[4],
                    expiry_date=parse_date(f[5]) if len(f) > 5 else None,
                )
            )
    actor = state.actor()
    try:
        grn = state.container.create_grn().handle(po_id, specs, actor, notes)
        po = state.container.po_repo.get_by_id(po_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"GRN {grn.grn_number} (#{grn.id}) completed, total {grn.total_amount}")
    click.echo(f"Batches created: {', '.join(grn.batch_ids)}")
    if po is not None:
        click.echo(f"Purchase order {po.po_number} is now {po.status.value}.")
