"""Rich/JSON output helpers.

The CLI renders ServiceResult for humans (Rich tables and key-value
lines) or machines (--json). The formatter layer adapts ServiceResult
to the requested output mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from listctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from listctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output switches taken from the global CLI flags."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        settings: Output mode; defaults to human-readable, non-verbose.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
