from pathlib import Path

import click

from ims.infrastructure.bootstrap import Container
from ims.infrastructure.cli.common import CliState
from ims.infrastructure.cli.issue_commands import (
    issue_approve,
    issue_create,
    issue_fulfil,
    issue_reject,
    return_approve,
    return_create,
    return_reject,
)
from ims.infrastructure.cli.item_commands import item_add, item_list
from ims.infrastructure.cli.procurement_commands import (
    grn_create,
    po_approve,
    po_cancel,
    po_create,
    po_send,
    pr_approve,
    pr_create,
    pr_reject,
)
from ims.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_audit,
    stock_consume,
    stock_expiry,
    stock_ledger,
    stock_reorder,
    stock_report,
    stock_valuation,
    stock_variance,
)
from ims.infrastructure.config import get_settings
from ims.infrastructure.logging_config import setup_logging


@click.group()
@click.option("--user", envvar="IMS_USER", help="Acting user id.")
@click.option("--role", envvar="IMS_ROLE", help="Acting role (admin, storekeeper, hod, accounts).")
@click.option("--data-dir", type=click.Path(file_okay=False), help="Override the data directory.")
@click.pass_context
def cli(ctx: click.Context, user: str | None, role: str | None, data_dir: str | None) -> None:
    """IMS - Institutional stores inventory"""
    settings = get_settings()
    if data_dir:
        settings = settings.model_copy(update={"data_dir": Path(data_dir)})
    setup_logging(settings.log_level, settings.log_file)
    ctx.obj = CliState(container=Container(settings), user=user, role=role)


@cli.group()
def item() -> None:
    """Manage the item catalog."""


@cli.group()
def pr() -> None:
    """Manage purchase requisitions."""


@cli.group()
def po() -> None:
    """Manage purchase orders."""


@cli.group()
def grn() -> None:
    """Receive goods against purchase orders."""


@cli.group()
def issue() -> None:
    """Manage issue requests."""


@cli.group("return")
def return_() -> None:
    """Manage stock returns."""


@cli.group()
def stock() -> None:
    """Stock movements and reports."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_list)
pr.add_command(pr_create)
pr.add_command(pr_approve)
pr.add_command(pr_reject)
po.add_command(po_create)
po.add_command(po_approve)
po.add_command(po_send)
po.add_command(po_cancel)
grn.add_command(grn_create)
issue.add_command(issue_create)
issue.add_command(issue_approve)
issue.add_command(issue_reject)
issue.add_command(issue_fulfil)
return_.add_command(return_create)
return_.add_command(return_approve)
return_.add_command(return_reject)
stock.add_command(stock_consume)
stock.add_command(stock_adjust)
stock.add_command(stock_report)
stock.add_command(stock_valuation)
stock.add_command(stock_ledger)
stock.add_command(stock_reorder)
stock.add_command(stock_expiry)
stock.add_command(stock_variance)
stock.add_command(stock_audit)
