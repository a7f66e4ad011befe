"""Command line interface for irfilter."""

from irfilter.cli.main import cli, main

__all__ = ["cli", "main"]
