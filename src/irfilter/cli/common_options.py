"""Shared Click options for irfilter CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import click

from irfilter.config import INPUT_FORMATS

F = TypeVar("F", bound=Callable[..., None])


def input_option(func: F) -> F:
    """Input IR table or SAM/BAM/CRAM file option."""
    return click.option(
        "-i",
        "--input",
        "input_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=False,
        help="Input IR table (TSV) or query-name grouped SAM/BAM/CRAM file",
    )(func)


def output_option(func: F) -> F:
    """Output directory option."""
    return click.option(
        "-o",
        "--output",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Output directory [default: irfilter_output]",
    )(func)


def prefix_option(func: F) -> F:
    """Output prefix option."""
    return click.option(
        "-p",
        "--prefix",
        default=None,
        help="Output file prefix [default: fragments]",
    )(func)


def config_option(func: F) -> F:
    """Configuration file option."""
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file (YAML)",
    )(func)


def format_option(func: F) -> F:
    """Input format option."""
    return click.option(
        "-f",
        "--format",
        "input_format",
        type=click.Choice(list(INPUT_FORMATS), case_sensitive=False),
        default=None,
        help="Input format [default: auto, from the file extension]",
    )(func)


def supplementary_option(func: F) -> F:
    return click.option(
        "--include-supplementary",
        is_flag=True,
        help="Keep supplementary alignments of SAM/BAM/CRAM input as candidates",
    )(func)


def no_progress_option(func: F) -> F:
    return click.option(
        "--no-progress",
        is_flag=True,
        help="Disable the progress bar",
    )(func)


def verbose_option(func: F) -> F:
    return click.option(
        "-v",
        "--verbose",
        count=True,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
    )(func)


def log_file_option(func: F) -> F:
    return click.option(
        "--log-file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Write a detailed (DEBUG) log to this file",
    )(func)


def filter_options(func: F) -> F:
    """Apply all options of the `run` command."""
    for option in reversed(
        [
            input_option,
            output_option,
            prefix_option,
            config_option,
            format_option,
            supplementary_option,
            no_progress_option,
            verbose_option,
            log_file_option,
        ]
    ):
        func = option(func)
    return func
