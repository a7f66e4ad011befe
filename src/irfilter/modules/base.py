"""
Base module interface for irfilter processing modules.

A module checks its input file and output locations, does its work in
``execute`` and reports the produced tables and counters in a ModuleResult.
``run`` wraps that life cycle so failures surface as a failed result rather
than an exception.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import pandas as pd
import pysam

from irfilter.constants import OUTPUT_COLUMNS
from irfilter.exceptions import ConfigurationError, FileFormatError, OutputError
from irfilter.utils.logging import get_logger


@dataclass
class ModuleResult:
    """Outcome of one module run: output tables, counters and warnings."""

    success: bool
    module_name: str
    output_files: dict[str, Path] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    error_message: Optional[str] = None
    execution_time: float = 0.0

    def add_output(self, key: str, path: Union[str, Path]) -> None:
        self.output_files[key] = Path(path)

    def add_metric(self, key: str, value: Any) -> None:
        self.metrics[key] = value

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class ModuleBase(ABC):
    """Base class for irfilter processing modules."""

    def __init__(
        self,
        name: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        debug: bool = False,
    ):
        """
        Args:
            name: Module name (defaults to class name)
            logger: Logger instance (creates new if None)
            debug: Log tracebacks of failures
        """
        self.name = name or self.__class__.__name__
        self.logger = logger or get_logger(self.name)
        self.debug = debug
        self._start_time: Optional[float] = None

    def validate_input_file(self, file_path: Union[str, Path], input_format: str) -> Path:
        """
        Check that the input exists and looks like the given format.

        IR tables must carry every output column in their header. Alignment
        files must open with pysam; a coordinate sorted file only draws a
        warning because fragments are read as runs of adjacent records.

        Raises:
            ConfigurationError: If the path is missing or not a file
            FileFormatError: If the file does not match ``input_format``
        """
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(f"Input file not found: {path}")
        if not path.is_file():
            raise ConfigurationError(f"Input is not a file: {path}")

        if input_format == "ir":
            self._check_ir_header(path)
        elif input_format == "sam":
            self._check_alignment_header(path)
        return path

    def _check_ir_header(self, path: Path) -> None:
        try:
            columns = pd.read_csv(path, sep="\t", nrows=0).columns
        except pd.errors.EmptyDataError:
            raise FileFormatError(f"IR table has no header: {path}", path=path) from None
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise FileFormatError(f"Cannot parse IR table {path}: {e}", path=path) from e

        missing = [col for col in OUTPUT_COLUMNS if col not in columns]
        if missing:
            raise FileFormatError(
                f"IR table {path} is missing column(s): {', '.join(missing)}", path=path
            )

    def _check_alignment_header(self, path: Path) -> None:
        try:
            with pysam.AlignmentFile(str(path), "r", check_sq=False) as alignment_file:
                sort_order = alignment_file.header.to_dict().get("HD", {}).get("SO")
        except (OSError, ValueError) as e:
            raise FileFormatError(f"Cannot open alignment file {path}: {e}", path=path) from e

        if sort_order == "coordinate":
            self.logger.warning(
                f"{path} is coordinate sorted; records of one read must be adjacent "
                "(group them with 'samtools collate' first)"
            )

    def validate_output_dir(self, output_dir: Union[str, Path]) -> Path:
        """Create the output directory if needed.

        Raises:
            OutputError: If the path is not a directory or cannot be created
        """
        path = Path(output_dir)
        if path.exists() and not path.is_dir():
            raise OutputError(f"Output path exists and is not a directory: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Cannot create output directory {path}: {e}") from e
        return path

    def validate_output_paths(
        self, input_file: Union[str, Path], outputs: Iterable[Union[str, Path]]
    ) -> None:
        """Refuse output tables that would overwrite the input while it is read.

        Raises:
            ConfigurationError: If an output table is the input file
        """
        source = Path(input_file).resolve()
        for output in outputs:
            if Path(output).resolve() == source:
                raise ConfigurationError(
                    f"Output table {output} would overwrite the input; "
                    "choose another output directory or prefix"
                )

    @abstractmethod
    def validate_inputs(self, **kwargs: Any) -> bool:
        """
        Validate all required inputs for the module.

        Raises:
            IRFilterError: If validation fails
        """

    @abstractmethod
    def execute(self, **kwargs: Any) -> ModuleResult:
        """Do the module's work and describe the produced tables."""

    def run(self, **kwargs: Any) -> ModuleResult:
        """
        Validate, execute and time the module.

        Any exception raised by the module ends up as a failed ModuleResult.
        """
        self._start_time = time.time()
        result = ModuleResult(success=False, module_name=self.name)

        try:
            self.logger.info(f"Starting {self.name}")
            self.validate_inputs(**kwargs)

            result = self.execute(**kwargs)
            result.module_name = self.name
            result.execution_time = time.time() - self._start_time

            if result.success:
                self.logger.info(f"{self.name} finished in {result.execution_time:.2f} seconds")
            else:
                self.logger.error(f"{self.name} failed: {result.error_message}")

            for warning in result.warnings:
                self.logger.warning(warning)

        except Exception as e:
            result.success = False
            result.error_message = str(e)
            result.execution_time = time.time() - self._start_time
            self.logger.error(f"{self.name} failed with error: {e}", exc_info=self.debug)

        return result
