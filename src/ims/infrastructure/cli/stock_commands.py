"""CLI commands for stock movements and stock reports."""

from __future__ import annotations

import json

import click

from ims.application.audit_sink import snapshot
from ims.domain.exceptions import DomainException, ValidationError
from ims.domain.model.ledger import LedgerQuery, ReferenceType, TransactionType
from ims.infrastructure.cli.common import CliState, fail, pass_state


@click.command("consume")
@click.option("--batch", "batch_id", required=True, help="Batch id.")
@click.option("--theoretical", required=True, help="Expected quantity.")
@click.option("--actual", required=True, help="Quantity actually used.")
@click.option("--department", default="", help="Consuming department id.")
@click.option("--notes", default=None, help="Notes.")
@pass_state
def stock_consume(
    state: CliState,
    batch_id: str,
    theoretical: str,
    actual: str,
    department: str,
    notes: str | None,
) -> None:
    """Record consumption against a batch."""
    actor = state.actor()
    try:
        log = state.container.record_consumption().handle(
            batch_id, theoretical, actual, actor, department_id=department, notes=notes
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Consumption #{log.id} recorded: theoretical {log.theoretical_qty}, "
        f"actual {log.actual_qty}, variance {log.variance}"
    )


@click.command("adjust")
@click.option("--item", "item_id", required=True, help="Item id.")
@click.option("--location", required=True, help="Location id.")
@click.option("--delta", required=True, help="Signed quantity (e.g. -3 or 5).")
@click.option("--reason", required=True, help="Why the stock is being corrected.")
@click.option("--batch", "batch_id", default=None, help="Batch to adjust (default: oldest with stock).")
@pass_state
def stock_adjust(
    state: CliState,
    item_id: str,
    location: str,
    delta: str,
    reason: str,
    batch_id: str | None,
) -> None:
    """Correct stock on a batch by a signed delta."""
    actor = state.actor()
    try:
        result = state.container.adjust_stock().handle(
            item_id, location, delta, reason, actor, batch_id=batch_id
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Batch #{result.batch_id} adjusted by {result.adjustment}: "
        f"{result.before_qty} -> {result.after_qty}"
    )


@click.command("report")
@click.option("--item", "item_id", default=None, help="Only this item.")
@click.option("--location", default=None, help="Only this location.")
@pass_state
def stock_report(state: CliState, item_id: str | None, location: str | None) -> None:
    """Show stock per item with its batches."""
    lines = state.container.stock_report().handle(item_id, location)

    if not lines:
        click.echo("No stock records found.")
        return

    click.echo(f"{'Code':<12} {'Name':<24} {'Unit':<6} {'Total':>10} {'Available':>10}")
    click.echo("-" * 66)
    for line in lines:
        click.echo(
            f"{line.item_code:<12} {line.item_name:<24} {line.unit:<6} "
            f"{str(line.total_qty):>10} {str(line.available_qty):>10}"
        )
        for b in line.batches:
            expiry = b.expiry_date.isoformat() if b.expiry_date else "-"
            click.echo(
                f"    batch {b.batch_number:<14} @ {b.location_id:<10} "
                f"{str(b.available_qty):>10} x {b.purchase_price}  exp {expiry}"
            )


@click.command("valuation")
@click.option("--method", default=None, help="fifo, lifo or wa (default from settings).")
@click.option("--item", "item_id", default=None, help="Only this item.")
@click.option("--location", default=None, help="Only this location.")
@pass_state
def stock_valuation(
    state: CliState, method: str | None, item_id: str | None, location: str | None
) -> None:
    """Value on-hand stock."""
    try:
        result = state.container.valuation_report().handle(method, item_id, location)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Valuation ({result.method.value})")
    click.echo(f"  {'Item':<10} {'Batch':<16} {'Qty':>10} {'Price':>12} {'Value':>14}")
    click.echo(f"  {'-'*66}")
    for line in result.lines:
        click.echo(
            f"  {line.item_id:<10} {line.batch_number or '-':<16} {str(line.quantity):>10} "
            f"{line.unit_price:>12.2f} {line.total_value:>14.2f}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Total':<50} {result.total_value:>14.2f}")


@click.command("ledger")
@click.option("--item", "item_id", default=None, help="Only this item.")
@click.option("--batch", "batch_id", default=None, help="Only this batch.")
@click.option("--type", "transaction_type", default=None, help="IN, OUT, ADJUST, RETURN or CONSUMPTION.")
@click.option("--reference-type", default=None, help="GRN, ISSUE, RETURN, CONSUMPTION or ADJUSTMENT.")
@click.option("--reference-id", default=None, help="Only entries for this document.")
@pass_state
def stock_ledger(
    state: CliState,
    item_id: str | None,
    batch_id: str | None,
    transaction_type: str | None,
    reference_type: str | None,
    reference_id: str | None,
) -> None:
    """List stock ledger entries."""
    try:
        filters = LedgerQuery(
            item_id=item_id,
            batch_id=batch_id,
            transaction_type=TransactionType(transaction_type.upper()) if transaction_type else None,
            reference_type=ReferenceType(reference_type.upper()) if reference_type else None,
            reference_id=reference_id,
        )
    except ValueError as exc:
        raise fail(ValidationError(str(exc)))

    lines = state.container.ledger_query().handle(filters)
    if not lines:
        click.echo("No ledger entries found.")
        return

    click.echo(f"{'ID':<6} {'When':<21} {'Type':<12} {'Item':<8} {'Batch':<8} {'Qty':>10} {'Reference':<16}")
    click.echo("-" * 86)
    for e in lines:
        click.echo(
            f"{e.entry_id:<6} {e.created_at:<21} {e.transaction_type:<12} {e.item_id:<8} "
            f"{e.batch_id or '-':<8} {str(e.quantity):>10} {e.reference:<16}"
        )


@click.command("reorder")
@pass_state
def stock_reorder(state: CliState) -> None:
    """List items at or below their reorder level."""
    lines = state.container.check_reorder().handle()

    if not lines:
        click.echo("No items need reordering.")
        return

    for line in lines:
        flag = "URGENT" if line.needs_urgent_reorder else "reorder"
        click.echo(
            f"[{flag}] {line.item_code} {line.item_name}: available {line.available_qty} "
            f"(reorder at {line.reorder_level}, min {line.min_stock})"
        )


@click.command("expiry")
@click.option("--days", type=int, default=None, help="Look-ahead window in days.")
@pass_state
def stock_expiry(state: CliState, days: int | None) -> None:
    """List batches that are expired or expiring soon."""
    try:
        report = state.container.check_expiry().handle(days)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Expiring within {report.days} days: {len(report.expiring)}")
    for b in report.expiring:
        click.echo(f"  batch {b.batch_number} (item {b.item_id}) {b.available_qty} left, expires {b.expiry_date} (in {b.days}d)")
    click.echo(f"Expired: {len(report.expired)}")
    for b in report.expired:
        click.echo(f"  batch {b.batch_number} (item {b.item_id}) {b.available_qty} left, expired {b.expiry_date} ({b.days}d ago)")


@click.command("variance")
@click.option("--item", "item_id", default=None, help="Only this item.")
@click.option("--department", default=None, help="Only this department.")
@pass_state
def stock_variance(state: CliState, item_id: str | None, department: str | None) -> None:
    """Consumption variance totals per item."""
    lines = state.container.variance_report().handle(item_id, department)

    if not lines:
        click.echo("No consumption records found.")
        return

    click.echo(f"{'Item':<10} {'Records':>8} {'Theoretical':>12} {'Actual':>10} {'Variance':>10} {'%':>8}")
    click.echo("-" * 63)
    for line in lines:
        click.echo(
            f"{line.item_id:<10} {line.records:>8} {str(line.theoretical_qty):>12} "
            f"{str(line.actual_qty):>10} {str(line.variance):>10} {str(line.variance_percentage):>8}"
        )


@click.command("audit")
@click.option("--entity", default=None, help="Entity type (e.g. purchase_order).")
@click.option("--entity-id", default=None, help="Entity id.")
@click.option("--by", "user_id", default=None, help="Acting user id.")
@pass_state
def stock_audit(
    state: CliState, entity: str | None, entity_id: str | None, user_id: str | None
) -> None:
    """Show the audit trail."""
    records = state.container.audit_query().handle(entity, entity_id, user_id)

    if not records:
        click.echo("No audit records found.")
        return

    for r in records:
        click.echo(f"{r.timestamp:%Y-%m-%d %H:%M:%S} {r.user_id:<10} {r.action:<13} {r.entity} #{r.entity_id}")
        if r.after is not None:
            click.echo(f"    {json.dumps(snapshot(r.after), sort_keys=True)[:200]}")
