"""``ocflkit validate ROOT``: run every check on an object root.

Exits with status 1 when any error finding is recorded.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ocflkit.config import OcflConfig
from ocflkit.core.errors import OcflError
from ocflkit.core.validator import OcflValidator
from ocflkit.report.renderer import ResultsRenderer

console = Console()


def validate_cmd(
    object_root: Path = typer.Argument(
        ...,
        help="Path to the OCFL object root directory.",
    ),
    fixity: Optional[str] = typer.Option(
        None,
        "--fixity",
        "-f",
        help="Check content against this fixity algorithm instead of the manifest digests.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the findings as JSON instead of a table.",
    ),
    hide_ok: bool = typer.Option(
        False,
        "--hide-ok",
        help="Leave ok findings out of the table.",
    ),
) -> None:
    """Validate an OCFL object root and report every finding."""
    try:
        validator = OcflValidator(object_root, config=OcflConfig())
    except OcflError as exc:
        console.print(f"[bold red]Cannot validate:[/bold red] {exc}")
        raise typer.Exit(code=1)

    results = validator.validate_object_root(fixity_algorithm=fixity)

    if as_json:
        typer.echo(json.dumps(results.all(), indent=2))
    else:
        ResultsRenderer(console=console).print_results(str(object_root), results, show_ok=not hide_ok)

    if results.error_count:
        raise typer.Exit(code=1)
