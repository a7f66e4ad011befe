"""Shared filter execution helpers for the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from irfilter.config import Config, load_config
from irfilter.exceptions import ConfigurationError, PipelineError
from irfilter.modules.base import ModuleResult
from irfilter.modules.fragment_filter import FragmentFilter
from irfilter.utils.logging import level_from_name, setup_logging


@dataclass
class FilterOptions:
    """Container for filter execution options."""

    input_file: Optional[Path]
    output: Optional[Path]  # None means use config or default
    prefix: Optional[str]  # None means use config or default
    config_path: Optional[Path]
    input_format: Optional[str] = None
    include_supplementary: bool = False
    no_progress: bool = False
    log_file: Optional[Path] = None
    verbose: int = 0


def resolve_config(opts: FilterOptions) -> Config:
    """Merge defaults, the config file and CLI options (in that order)."""
    cfg = load_config(opts.config_path) if opts.config_path else Config()

    if opts.input_file:
        cfg.input_file = opts.input_file
    if opts.output:
        cfg.output_dir = opts.output
    if opts.prefix:
        cfg.prefix = opts.prefix
    if opts.input_format:
        cfg.input_format = opts.input_format.lower()
    if opts.include_supplementary:
        cfg.include_supplementary = True
    if opts.no_progress:
        cfg.runtime.enable_progress = False
    if opts.log_file:
        cfg.runtime.log_file = opts.log_file
    return cfg


def execute_filter(opts: FilterOptions, logger: logging.Logger) -> ModuleResult:
    """
    Run the fragment filter with the given options.

    Raises:
        ConfigurationError: If the merged configuration is invalid
        PipelineError: If the run fails
    """
    cfg = resolve_config(opts)

    # CLI verbosity wins over the config file log level
    if opts.verbose == 0:
        setup_logging(level=level_from_name(cfg.runtime.log_level), log_file=cfg.runtime.log_file)

    if not cfg.input_file:
        raise ConfigurationError("An input file is required (use -i or set input_file in the config)")
    cfg.validate()

    logger.debug(f"Configuration: {cfg.to_dict()}")
    module = FragmentFilter(cfg, debug=opts.verbose >= 2)
    result = module.run()
    if not result.success:
        raise PipelineError(result.error_message or "fragment filter failed")

    metrics = result.metrics
    click.echo(
        f"Accepted:  {metrics['accepted_fragments']:,} fragments "
        f"({metrics['accepted_rows']:,} rows) -> {result.output_files['accepted']}"
    )
    click.echo(
        f"Discarded: {metrics['discarded_fragments']:,} fragments "
        f"({metrics['discarded_rows']:,} rows) -> {result.output_files['discarded']}"
    )
    return result
