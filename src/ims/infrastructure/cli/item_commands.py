"""CLI commands for the item catalog."""

from __future__ import annotations

import click

from ims.domain.exceptions import DomainException
from ims.infrastructure.cli.common import CliState, fail, pass_state


@click.command("add")
@click.option("--code", required=True, help="Unique item code.")
@click.option("--name", required=True, help="Item name.")
@click.option("--category", required=True, help="Category (e.g. stationery).")
@click.option("--unit", required=True, help="Unit of measure (e.g. pcs, kg).")
@click.option("--min-stock", default="0", show_default=True, help="Minimum stock level.")
@click.option("--reorder-level", default="0", show_default=True, help="Reorder level.")
@click.option("--description", default=None, help="Free-text description.")
@pass_state
def item_add(
    state: CliState,
    code: str,
    name: str,
    category: str,
    unit: str,
    min_stock: str,
    reorder_level: str,
    description: str | None,
) -> None:
    """Add a new item to the catalog."""
    actor = state.actor()
    try:
        item = state.container.add_item().handle(
            actor, code, name, category, unit, min_stock, reorder_level, description
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Item #{item.id} '{item.code}' ({item.name}) added")


@click.command("list")
@pass_state
def item_list(state: CliState) -> None:
    """List all items in the catalog."""
    items = state.container.item_repo.list_all()

    if not items:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<6} {'Code':<12} {'Name':<24} {'Category':<14} {'Unit':<6} {'Reorder':>8}")
    click.echo("-" * 75)
    for i in items:
        click.echo(
            f"{i.id:<6} {i.code:<12} {i.name:<24} {i.category:<14} {i.unit:<6} {str(i.reorder_level):>8}"
        )
