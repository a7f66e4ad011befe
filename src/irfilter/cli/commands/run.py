"""`run` subcommand implementation."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from irfilter.cli.exit_codes import EXIT_ERROR, EXIT_USAGE, interrupt_exit_code
from irfilter.exceptions import IRFilterError
from irfilter.utils.logging import get_logger, level_from_verbosity, setup_logging

from ..common_options import filter_options
from ..pipeline import FilterOptions, execute_filter


@click.command()
@filter_options
def run(
    input_file: Optional[Path],
    output: Optional[Path],
    prefix: Optional[str],
    config: Optional[Path],
    input_format: Optional[str],
    include_supplementary: bool,
    no_progress: bool,
    verbose: int,
    log_file: Optional[Path],
) -> None:
    """Split fragments into accepted and discarded tables."""
    setup_logging(level=level_from_verbosity(verbose), log_file=log_file)
    logger = get_logger("cli")

    if input_file is None and config is None:
        click.echo("Error: run needs an input file (-i/--input) or a config file (-c/--config)", err=True)
        sys.exit(EXIT_USAGE)

    try:
        opts = FilterOptions(
            input_file=input_file,
            output=output,
            prefix=prefix,
            config_path=config,
            input_format=input_format,
            include_supplementary=include_supplementary,
            no_progress=no_progress,
            log_file=log_file,
            verbose=verbose,
        )
        execute_filter(opts, logger)

    except KeyboardInterrupt as exc:
        logger.info("Run interrupted by user")
        sys.exit(interrupt_exit_code(exc))
    except IRFilterError as exc:
        logger.error(f"Filter error: {exc}")
        sys.exit(EXIT_ERROR)
    except Exception as exc:
        logger.exception(f"Unexpected error: {exc}")
        sys.exit(EXIT_ERROR)
