"""Rich terminal renderer for validation results, deltas and file lists.

Color scheme
------------
- green  : ok
- cyan   : info
- yellow : warn
- red    : error
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ocflkit.core.results import OcflResults
from ocflkit.models.findings import Severity

# ---------------------------------------------------------------------------
# Severity -> Rich style mapping
# ---------------------------------------------------------------------------

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.OK: "green",
    Severity.INFO: "cyan",
    Severity.WARN: "yellow",
    Severity.ERROR: "bold red",
}

_SEVERITY_LABELS: dict[Severity, str] = {
    Severity.OK: "[green]OK[/green]",
    Severity.INFO: "[cyan]INFO[/cyan]",
    Severity.WARN: "[yellow]WARN[/yellow]",
    Severity.ERROR: "[bold red]ERROR[/bold red]",
}

# Rows are listed worst first.
_SEVERITY_ORDER = (Severity.ERROR, Severity.WARN, Severity.INFO, Severity.OK)


class ResultsRenderer:
    """Renders ``OcflResults`` and delta records as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Validation results
    # ------------------------------------------------------------------

    def render_results(self, object_root: str, results: OcflResults, *, show_ok: bool = True) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Severity", width=8, justify="center")
        table.add_column("Code", style="bold", width=6)
        table.add_column("Context", min_width=18)
        table.add_column("Description", min_width=30)

        findings = sorted(
            results.findings(),
            key=lambda f: (_SEVERITY_ORDER.index(f.severity), f.code.value, f.context),
        )
        for finding in findings:
            if finding.severity is Severity.OK and not show_ok:
                continue
            table.add_row(
                _SEVERITY_LABELS[finding.severity],
                finding.code.value,
                finding.context,
                finding.description,
            )

        summary = "  |  ".join([
            f"[bold red]Errors:[/bold red] {results.error_count}",
            f"[yellow]Warnings:[/yellow] {results.warn_count}",
            f"[cyan]Info:[/cyan] {results.info_count}",
            f"[green]OK:[/green] {results.ok_count}",
        ])
        border = "red" if results.error_count else "green"
        return Panel(
            Group(table, Text(""), Text.from_markup(summary)),
            title=f"[bold]OCFL validation[/bold] {object_root}",
            border_style=border,
            padding=(1, 2),
        )

    def print_results(self, object_root: str, results: OcflResults, *, show_ok: bool = True) -> None:
        self.console.print(self.render_results(object_root, results, show_ok=show_ok))

    # ------------------------------------------------------------------
    # Deltas and file lists
    # ------------------------------------------------------------------

    def render_delta(self, deltas: dict[str, dict[str, dict[str, list[str]]]]) -> Table:
        """One row per (version, action, digest)."""
        table = Table(title="Version deltas", show_header=True, header_style="bold cyan")
        table.add_column("Version", style="bold")
        table.add_column("Action")
        table.add_column("Digest", style="dim", max_width=20, overflow="ellipsis")
        table.add_column("Paths")

        for version, record in deltas.items():
            if not record:
                table.add_row(version, "[dim]-[/dim]", "", "")
            for action, entries in record.items():
                for digest, paths in entries.items():
                    shown = paths if isinstance(paths, str) else "\n".join(paths)
                    table.add_row(version, action, digest, shown)
        return table

    def render_files(self, version: str, files: dict[str, str]) -> Table:
        table = Table(title=f"Files in {version}", show_header=True, header_style="bold cyan")
        table.add_column("Logical path")
        table.add_column("Content path", style="dim")
        for logical, physical in sorted(files.items()):
            table.add_row(logical, physical)
        return table
