"""Installation validation command."""

from __future__ import annotations

import sys

import click

from irfilter import __version__
from irfilter.cli.exit_codes import EXIT_ERROR
from irfilter.utils.validators import validate_installation


@click.command()
def validate() -> None:
    """Validate irfilter installation and dependencies."""
    click.echo("Validating irfilter installation...")

    issues = validate_installation()
    if not issues:
        click.echo("✓ All checks passed!")
        click.echo(f"  irfilter version: {__version__}")
    else:
        click.echo("✗ Issues found:")
        for issue in issues:
            click.echo(f"  - {issue}")
        sys.exit(EXIT_ERROR)
