"""Main Typer application: imports and registers all CLI commands.

Entry point: ``ocflkit`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ocflkit.cli.commands.delta import delta_cmd
from ocflkit.cli.commands.files import files_cmd
from ocflkit.cli.commands.validate import validate_cmd
from ocflkit.config import OcflConfig

app = typer.Typer(
    name="ocflkit",
    help="ocflkit: validate and inspect OCFL objects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to OCFLKIT_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging once for every subcommand."""
    level = (log_level or OcflConfig().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="validate", help="Validate an OCFL object root.")(validate_cmd)
app.command(name="delta", help="Show the file operations of each version.")(delta_cmd)
app.command(name="files", help="List the logical files of a version.")(files_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
