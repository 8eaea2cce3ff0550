"""``ocflkit files ROOT``: list logical paths and where their bytes live."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ocflkit.config import OcflConfig
from ocflkit.core.errors import OcflError
from ocflkit.core.files import INVENTORY_FILE
from ocflkit.core.inventory import OcflInventory
from ocflkit.report.renderer import ResultsRenderer

console = Console()


def files_cmd(
    object_root: Path = typer.Argument(
        ...,
        help="Path to the OCFL object root directory.",
    ),
    version: Optional[int] = typer.Option(
        None,
        "--version",
        "-v",
        help="Version number to list (defaults to head).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the file map as JSON instead of a table.",
    ),
) -> None:
    """List the files of one version of an object."""
    try:
        inventory = OcflInventory.from_file(object_root / INVENTORY_FILE, config=OcflConfig())
        if version is None:
            files = inventory.get_current_files()
            label = inventory.head
        else:
            files = inventory.get_files(version)
            label = inventory.version_name(version)
    except OcflError as exc:
        console.print(f"[bold red]Cannot list files:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(files, indent=2))
    else:
        console.print(ResultsRenderer(console=console).render_files(label, files))
