"""CLI commands for issue requests and stock returns."""

from __future__ import annotations

import click

from ims.application.dto import IssueItemSpec, ReturnItemSpec
from ims.domain.exceptions import DomainException
from ims.infrastructure.cli.common import CliState, fail, pass_state, split_specs

# --- Issue requests -----------------------------------------------------------


@click.command("create")
@click.option("--department", required=True, help="Requesting department id.")
@click.option("--items", required=True, help="Items as 'ItemId:Qty,...'.")
@click.option("--purpose", default="", help="What the items are for.")
@pass_state
def issue_create(state: CliState, department: str, items: str, purpose: str) -> None:
    """Request items from stores."""
    specs = [
        IssueItemSpec(item_id=f[0], quantity=f[1])
        for f in split_specs(items, 2, 2, "ItemId:Qty")
    ]
    actor = state.actor()
    try:
        issue = state.container.create_issue().handle(actor, department, specs, purpose)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Issue request {issue.issue_number} (#{issue.id}) created  (status={issue.status.value})")


@click.command("approve")
@click.option("--id", "issue_id", required=True, help="Issue request id.")
@pass_state
def issue_approve(state: CliState, issue_id: str) -> None:
    """Approve a pending issue request."""
    actor = state.actor()
    try:
        issue = state.container.approve_issue().handle(issue_id, actor)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Issue request {issue.issue_number} approved.")


@click.command("reject")
@click.option("--id", "issue_id", required=True, help="Issue request id.")
@click.option("--reason", default=None, help="Rejection reason.")
@pass_state
def issue_reject(state: CliState, issue_id: str, reason: str | None) -> None:
    """Reject a pending issue request."""
    actor = state.actor()
    try:
        issue = state.container.reject_issue().handle(issue_id, actor, reason)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Issue request {issue.issue_number} rejected: {issue.rejection_reason}")


@click.command("fulfil")
@click.option("--id", "issue_id", required=True, help="Issue request id.")
@click.option("--location", default=None, help="Only draw from this location.")
@pass_state
def issue_fulfil(state: CliState, issue_id: str, location: str | None) -> None:
    """Issue an approved request from stock, oldest batches first."""
    actor = state.actor()
    try:
        issue, movements = state.container.issue_items().handle(issue_id, actor, location)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Issue request {issue.issue_number} issued.")
    click.echo()
    click.echo(f"  {'Item':<10} {'Batch':<16} {'Qty':>10} {'Left':>10}")
    click.echo(f"  {'-'*49}")
    for m in movements:
        click.echo(
            f"  {m.batch.item_id:<10} {m.batch.batch_number:<16} "
            f"{str(-m.entry.quantity):>10} {str(m.batch.available_qty):>10}"
        )


# --- Returns ------------------------------------------------------------------


@click.command("create")
@click.option("--department", required=True, help="Returning department id.")
@click.option("--items", required=True, help="Items as 'ItemId:BatchId:Qty,...'.")
@click.option("--reason", required=True, help="Why the items are coming back.")
@click.option("--issue", "issue_id", default=None, help="Originating issue request id.")
@pass_state
def return_create(
    state: CliState, department: str, items: str, reason: str, issue_id: str | None
) -> None:
    """Record items handed back to stores."""
    specs = [
        ReturnItemSpec(item_id=f[0], batch_id=f[1], quantity=f[2])
        for f in split_specs(items, 3, 3, "ItemId:BatchId:Qty")
    ]
    actor = state.actor()
    try:
        ret = state.container.create_return().handle(actor, department, specs, reason, issue_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Return {ret.return_number} (#{ret.id}) created  (status={ret.status.value})")


@click.command("approve")
@click.option("--id", "return_id", required=True, help="Return id.")
@pass_state
def return_approve(state: CliState, return_id: str) -> None:
    """Approve a return and put the stock back."""
    actor = state.actor()
    try:
        ret = state.container.approve_return().handle(return_id, actor)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Return {ret.return_number} approved; stock credited.")


@click.command("reject")
@click.option("--id", "return_id", required=True, help="Return id.")
@click.option("--reason", default=None, help="Rejection reason.")
@pass_state
def return_reject(state: CliState, return_id: str, reason: str | None) -> None:
    """Reject a pending return."""
    actor = state.actor()
    try:
        ret = state.container.reject_return().handle(return_id, actor, reason)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Return {ret.return_number} rejected: {ret.rejection_reason}")
