"""Commands: insert, move and remove items."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listctl.commands._base import ListctlCommand
from listctl.domain.types import MoveDirection

if TYPE_CHECKING:
    from listctl.commands._context import AppContext


@click.command(
    cls=ListctlCommand,
    examples="""\
  listctl insert todo_items 42 1
  listctl insert chapters 7 3""",
)
@click.argument("list_name")
@click.argument("item_id")
@click.argument("position", type=int)
@click.pass_obj
def insert(app: AppContext, list_name: str, item_id: str, position: int) -> None:
    """Put ITEM_ID at POSITION, shifting the items in between."""
    from listctl.services.ordering import OrderingService

    app.emit(OrderingService(app.catalog).insert(list_name, item_id, position))


@click.command(
    cls=ListctlCommand,
    examples="""\
  listctl move todo_items 42 top
  listctl move todo_items 42 down""",
)
@click.argument("list_name")
@click.argument("item_id")
@click.argument("direction", type=click.Choice([d.value for d in MoveDirection]))
@click.pass_obj
def move(app: AppContext, list_name: str, item_id: str, direction: str) -> None:
    """Move ITEM_ID to the top or bottom, or one step up or down."""
    from listctl.services.ordering import OrderingService

    app.emit(OrderingService(app.catalog).move(list_name, item_id, MoveDirection(direction)))


@click.command(
    cls=ListctlCommand,
    examples="""\
  listctl remove todo_items 42""",
)
@click.argument("list_name")
@click.argument("item_id")
@click.pass_obj
def remove(app: AppContext, list_name: str, item_id: str) -> None:
    """Take ITEM_ID out of its list and close the gap."""
    from listctl.services.ordering import OrderingService

    app.emit(OrderingService(app.catalog).remove(list_name, item_id))
