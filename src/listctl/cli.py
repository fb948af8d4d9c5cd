"""Root CLI group for listctl with global flags and command registration."""

from __future__ import annotations

import click

from listctl import __version__
from listctl.commands import register_commands
from listctl.commands._context import AppContext
from listctl.config.settings import ListctlSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="listctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--db", "db_url", default=None, help="Database URL (overrides [database] url).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    db_url: str | None,
) -> None:
    """listctl — keep scoped lists dense and gap-free."""
    ctx.ensure_object(dict)
    settings = ListctlSettings.from_cli(
        config_path=config_path,
        db_url=db_url,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    ctx.call_on_close(ctx.obj.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
