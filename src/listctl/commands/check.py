"""Command: verify that every scope of a list is contiguous."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listctl.commands._base import ListctlCommand

if TYPE_CHECKING:
    from listctl.commands._context import AppContext


@click.command(
    cls=ListctlCommand,
    examples="""\
  listctl check todo_items
  listctl --json check todo_items""",
)
@click.argument("list_name")
@click.option("--strict", is_flag=True, help="Exit with code 1 when any scope has a gap.")
@click.pass_obj
def check(app: AppContext, list_name: str, strict: bool) -> None:
    """Report scopes whose positions are not top..top+n-1."""
    from listctl.services.ordering import OrderingService

    result = OrderingService(app.catalog).check(list_name)
    app.emit(result)
    if strict and result.ok and result.data.get("count"):
        raise SystemExit(1)
