"""Commands: list configured lists and show one scope."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listctl.commands._base import ListctlCommand

if TYPE_CHECKING:
    from listctl.commands._context import AppContext


def parse_scope(values: tuple[str, ...]) -> dict[str, str]:
    """Turn ``("todo_list_id=1", ...)`` into ``{"todo_list_id": "1"}``."""
    scope: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {raw!r}"
            raise click.BadParameter(msg, param_hint="--scope")
        scope[key] = value
    return scope


@click.command(
    cls=ListctlCommand,
    examples="""\
  listctl lists
  listctl --json lists""",
)
@click.pass_obj
def lists(app: AppContext) -> None:
    """Show configured lists and their update mode."""
    from listctl.services.ordering import OrderingService

    app.emit(OrderingService(app.catalog).lists())


@click.command(
    cls=ListctlCommand,
    examples="""\
  listctl show todo_items --scope todo_list_id=1
  listctl show chapters --scope book_id=7 --scope volume=2
  listctl -v show todo_items --scope todo_list_id=1""",
)
@click.argument("list_name")
@click.option("--scope", "scope", multiple=True, help="Scope value as KEY=VALUE (repeatable).")
@click.pass_obj
def show(app: AppContext, list_name: str, scope: tuple[str, ...]) -> None:
    """Show the items of one scope, top first."""
    from listctl.services.ordering import OrderingService

    app.emit(OrderingService(app.catalog).show(list_name, parse_scope(scope)))
