"""Shared CLI plumbing: the per-invocation context and input parsing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import click

from ims.domain.exceptions import DomainException
from ims.domain.model.actor import Actor
from ims.infrastructure.bootstrap import Container
from ims.infrastructure.logging_config import get_logger

logger = get_logger("cli")


@dataclass
class CliState:
    container: Container
    user: str | None
    role: str | None

    def actor(self) -> Actor:
        if not self.user or not self.role:
            raise click.UsageError("--user and --role (or IMS_USER / IMS_ROLE) are required")
        try:
            return Actor.of(self.user, self.role)
        except DomainException as exc:
            raise fail(exc)


pass_state = click.make_pass_decorator(CliState)


def fail(exc: DomainException) -> click.ClickException:
    logger.warning("Rejected: [%s] %s", exc.kind, exc)
    return click.ClickException(f"[{exc.kind}] {exc}")


def split_specs(raw: str, min_fields: int, max_fields: int, fmt: str) -> list[list[str]]:
    """Split 'a:b,c:d' into [['a', 'b'], ['c', 'd']], checking field counts."""
    rows: list[list[str]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        fields = [f.strip() for f in chunk.split(":")]
        if not min_fields <= len(fields) <= max_fields:
            raise click.BadParameter(f"Invalid item format '{chunk}'. Expected '{fmt}'.")
        rows.append(fields)
    if not rows:
        raise click.BadParameter(f"At least one item is required ('{fmt}').")
    return rows


def parse_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise click.BadParameter(f"Invalid date '{raw}'. Expected YYYY-MM-DD.")
