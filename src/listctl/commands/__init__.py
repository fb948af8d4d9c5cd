"""Subcommand modules for listctl.

Provides register_commands() which uses deferred imports to keep
``listctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from listctl.commands.check import check
    from listctl.commands.reorder import insert, move, remove
    from listctl.commands.show import lists, show

    cli.add_command(lists)
    cli.add_command(show)
    cli.add_command(insert)
    cli.add_command(move)
    cli.add_command(remove)
    cli.add_command(check)
