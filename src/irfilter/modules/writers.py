"""
Output tables for classified fragments.

Rows go to one of two append-only destinations, ``accepted`` and
``discarded``, each backed by a tab-separated file with the IR table layout.
Rows are buffered per destination and flushed in chunks with pandas.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, NamedTuple, Optional, Union

import pandas as pd

from irfilter.constants import DEFAULT_CHUNK_SIZE, DEFAULT_UNALIGNED_VALUES, OUTPUT_COLUMNS
from irfilter.core.classify import Verdict
from irfilter.core.models import Fragment
from irfilter.core.sequence import Sequence
from irfilter.exceptions import OutputError
from irfilter.utils.logging import LogTemplates, get_logger


class Destination(Enum):
    ACCEPTED = "accepted"
    DISCARDED = "discarded"


class AlignedFields(NamedTuple):
    """Placement columns, present only for aligned records."""

    reference: str
    strand: str
    position: int
    cigar: str


class TableWriter:
    """Write output rows to the accepted and discarded tables."""

    def __init__(
        self,
        accepted_path: Union[str, Path],
        discarded_path: Union[str, Path],
        defaults: Optional[Mapping[str, Any]] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Args:
            accepted_path: Table receiving rows of accepted fragments
            discarded_path: Table receiving rows of discarded fragments
            defaults: Values for REFERENCE/STRAND/POSITION/CIGAR of unaligned rows
            chunk_size: Rows buffered per destination before writing
            logger: Optional logger instance
        """
        self.paths = {
            Destination.ACCEPTED: Path(accepted_path),
            Destination.DISCARDED: Path(discarded_path),
        }
        values = {**DEFAULT_UNALIGNED_VALUES, **(defaults or {})}
        self.defaults = AlignedFields(
            reference=values["reference"],
            strand=values["strand"],
            position=values["position"],
            cigar=values["cigar"],
        )
        self.chunk_size = chunk_size
        self.logger = logger or get_logger(self.__class__.__name__)
        self.rows_written = {destination: 0 for destination in Destination}
        self._buffers: dict[Destination, list[tuple]] = {destination: [] for destination in Destination}
        self._opened = False

    def open(self) -> TableWriter:
        """Create (or truncate) both tables and write their headers."""
        header = pd.DataFrame(columns=OUTPUT_COLUMNS)
        for destination, path in self.paths.items():
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                header.to_csv(path, sep="\t", index=False)
            except OSError as e:
                raise OutputError(f"Cannot create {destination.value} table {path}: {e}") from e
        self._opened = True
        return self

    def append_row(
        self,
        destination: Destination,
        group: str,
        name: str,
        read_no: int,
        sequence: Union[str, Sequence],
        aligned_fields: Optional[AlignedFields] = None,
    ) -> None:
        """Append one row; unaligned rows (no ``aligned_fields``) get the defaults."""
        if not self._opened:
            raise OutputError("TableWriter.append_row called before open()")
        fields = aligned_fields if aligned_fields is not None else self.defaults
        buffer = self._buffers[destination]
        buffer.append((group, name, read_no, str(sequence), *fields))
        if len(buffer) >= self.chunk_size:
            self.flush(destination)

    def flush(self, destination: Optional[Destination] = None) -> None:
        """Write buffered rows of one destination, or of both."""
        targets = [destination] if destination is not None else list(Destination)
        for target in targets:
            rows = self._buffers[target]
            if not rows:
                continue
            path = self.paths[target]
            try:
                pd.DataFrame(rows, columns=OUTPUT_COLUMNS).to_csv(
                    path, sep="\t", mode="a", header=False, index=False
                )
            except OSError as e:
                raise OutputError(f"Failed writing {target.value} table {path}: {e}") from e
            self.rows_written[target] += len(rows)
            self._buffers[target] = []

    def close(self) -> None:
        if not self._opened:
            return
        self.flush()
        self._opened = False
        for destination, path in self.paths.items():
            self.logger.info(
                LogTemplates.FILE_CREATED.format(path=path, rows=self.rows_written[destination])
            )

    def __enter__(self) -> TableWriter:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            # Keep what was classified before the failure
            try:
                self.flush()
            except OutputError as e:
                self.logger.error(f"Could not flush pending rows: {e}")
            self._opened = False


def emit(writer: TableWriter, fragment: Fragment, verdict: Verdict) -> int:
    """Write the records of a verdict to its destination; return the row count."""
    destination = Destination(verdict.outcome.value)
    for record in verdict.records:
        aligned_fields = None
        if record.aligned:
            aligned_fields = AlignedFields(
                record.reference, record.strand, record.position, record.cigar
            )
        writer.append_row(
            destination,
            fragment.group,
            fragment.name,
            record.read_no,
            record.sequence,
            aligned_fields,
        )
    return len(verdict.records)
