"""Command-line interface for vslparser."""

from vslparser.cli.main import cli, main

__all__ = ["cli", "main"]
