"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Catalog initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from listctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from listctl.config.settings import ListctlSettings
    from listctl.infrastructure.catalog import Catalog
    from listctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The catalog is lazily initialized on first use so ``--help`` and
    ``--version`` never open a database connection.
    """

    def __init__(self, settings: ListctlSettings) -> None:
        self.settings = settings
        self._catalog: Catalog | None = None

        from listctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            log_sql=settings.database.echo,
        )

    @property
    def catalog(self) -> Catalog:
        """The catalog instance (created lazily on first access)."""
        if self._catalog is None:
            from listctl.infrastructure.catalog import Catalog

            self._catalog = Catalog(self.settings)
        return self._catalog

    def close(self) -> None:
        """Dispose of the database engine, if one was opened."""
        if self._catalog is not None:
            self._catalog.close()
            self._catalog = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
