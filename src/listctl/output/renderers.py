"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from listctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from listctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("id", item.get("name", ""))) for item in items)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="lc.ok")
    op = Text(f"  {result.op}", style="lc.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, *, position: bool = False) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="lc.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="lc.id")
    elif position:
        v = Text(str(value), style="lc.position")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="lc.error")
    op = Text(f"  {result.op}", style="lc.op")
    sep = Text(" — ")
    console.print(label, op, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Renderers ─────────────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render insert/move/remove results."""
    _status_line(console, result)
    shown = ("list", "id", result.data.get("column", "position"))
    for key in shown:
        if key in result.data:
            _field(console, key, result.data[key], position=key == shown[-1])
    if verbose:
        for key, value in result.data.items():
            if key not in (*shown, "column"):
                _field(console, key, value)


def _render_items(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render one scope of a list as a table, top first."""
    items: list[dict[str, Any]] = result.data.get("items", [])
    if not items:
        console.print("[dim]No items in this scope.[/dim]")
        return

    position = result.data.get("column", "position")
    columns = [position, "id"]
    if verbose:
        columns += [k for k in items[0] if k not in columns]

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for col in columns:
        style = {position: "lc.position", "id": "lc.id"}.get(col, "")
        justify = "right" if col == position else "left"
        table.add_column(col.replace("_", " ").title(), style=style, justify=justify)
    for item in items:
        table.add_row(*(str(item.get(col, "")) for col in columns))
    console.print(table)


def _render_lists(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render configured lists with their update mode."""
    items: list[dict[str, Any]] = result.data.get("items", [])
    if not items:
        console.print("[dim]No lists configured.[/dim]")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for col in ("Name", "Table", "Column", "Scope", "Top", "New At", "Mode"):
        table.add_column(col)
    for item in items:
        table.add_row(
            str(item["name"]),
            str(item["table"]),
            str(item["column"]),
            str(item["scope"]),
            str(item["top"]),
            str(item["add_new_at"]),
            str(item["mode"]),
        )
    console.print(table)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render scopes whose positions are not contiguous."""
    issues: list[dict[str, Any]] = result.data.get("issues", [])
    scopes = result.data.get("scopes", 0)

    if not issues:
        console.print(f"[lc.ok]OK[/lc.ok]  {scopes} scope(s), all contiguous.")
        return

    for issue in issues:
        scope = ", ".join(f"{k}={v}" for k, v in issue["scope"].items()) or "(whole table)"
        label = escape(f"[{scope}]")
        console.print(f"  [lc.warning]gap[/lc.warning] {label}: {issue['positions']}")
        if verbose:
            console.print(f"    expected: {issue['expected']}")
    console.print(f"\n{len(issues)} of {scopes} scope(s) need attention")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":"), default=str))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "insert": _render_mutation,
    "move": _render_mutation,
    "remove": _render_mutation,
    "show": _render_items,
    "lists": _render_lists,
    "check": _render_check,
}
