"""ocflkit CLI: Typer-based command-line interface.

Provides the ``ocflkit`` command with subcommands for validating object
roots, showing version deltas and listing version files.

All output uses Rich for formatted terminal display.
"""
