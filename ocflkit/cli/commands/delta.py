"""``ocflkit delta ROOT``: explain each version as add/update/copy/move/delete."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ocflkit.config import OcflConfig
from ocflkit.core.delta import OcflDelta
from ocflkit.core.errors import OcflError
from ocflkit.core.files import INVENTORY_FILE
from ocflkit.core.inventory import OcflInventory
from ocflkit.report.renderer import ResultsRenderer

console = Console()


def delta_cmd(
    object_root: Path = typer.Argument(
        ...,
        help="Path to the OCFL object root directory.",
    ),
    version: Optional[int] = typer.Option(
        None,
        "--version",
        "-v",
        help="Only show the delta for this version number.",
    ),
    include_manifest: bool = typer.Option(
        False,
        "--manifest",
        help="Also list the new content paths of each version.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the deltas as JSON instead of a table.",
    ),
) -> None:
    """Show the file operations between consecutive versions."""
    try:
        inventory = OcflInventory.from_file(object_root / INVENTORY_FILE, config=OcflConfig())
        engine = OcflDelta(inventory, include_manifest=include_manifest)
        if version is None:
            deltas = engine.all()
        else:
            deltas = {inventory.version_name(version): engine.previous(version)}
    except OcflError as exc:
        console.print(f"[bold red]Cannot compute delta:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(deltas, indent=2))
    else:
        console.print(ResultsRenderer(console=console).render_delta(deltas))
