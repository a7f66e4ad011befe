"""
Fragment readers.

Input side of a filtering run. Two sources are supported:

- IR tables: tab-separated files with one alignment candidate per row
  (the same layout the filter writes, so its output can be read back)
- SAM/BAM/CRAM files read with pysam, grouped by query name

Both yield one Fragment per run of consecutive rows sharing read group and
fragment name; rows are not regrouped across the file.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from itertools import groupby
from operator import itemgetter
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import pandas as pd
import pysam

from irfilter.constants import (
    COL_BAD,
    COL_CIGAR,
    COL_FRAGMENT,
    COL_POSITION,
    COL_READ_GROUP,
    COL_READNO,
    COL_REFERENCE,
    COL_SEQUENCE,
    COL_STRAND,
    DEFAULT_CHUNK_SIZE,
    OUTPUT_COLUMNS,
    TRUE_VALUES,
)
from irfilter.core.models import AlignmentRecord, Fragment
from irfilter.core.sequence import Sequence
from irfilter.exceptions import FileFormatError
from irfilter.utils.logging import get_logger

ALIGNMENT_SUFFIXES = {".sam", ".bam", ".cram"}


class FragmentReader(ABC):
    """Iterate the fragments of one input file."""

    def __init__(self, path: Union[str, Path], logger: Optional[logging.Logger] = None) -> None:
        self.path = Path(path)
        self.logger = logger or get_logger(self.__class__.__name__)
        self.records_read = 0
        self.fragments_read = 0
        self.skipped_supplementary = 0

    @abstractmethod
    def _rows(self) -> Iterator[tuple[str, str, Any]]:
        """Yield ``(group, name, payload)`` in file order."""

    @abstractmethod
    def _records(self, payloads: list[Any]) -> list[AlignmentRecord]:
        """Turn the payloads of one fragment into alignment records."""

    def __iter__(self) -> Iterator[Fragment]:
        for (group, name), rows in groupby(self._rows(), key=itemgetter(0, 1)):
            payloads = [payload for _, _, payload in rows]
            self.records_read += len(payloads)
            self.fragments_read += 1
            yield Fragment(group, name, self._records(payloads))


def _parse_int(value: str, column: str, path: Path, line: int, default: Optional[int] = None) -> int:
    value = value.strip()
    if not value and default is not None:
        return default
    try:
        return int(value)
    except ValueError:
        raise FileFormatError(
            f"{path}:{line}: {column} must be an integer, got {value!r}", path=path, line=line
        ) from None


class IRTableReader(FragmentReader):
    """Read fragments from a tab-separated IR table.

    Required columns are READ_GROUP, FRAGMENT, READNO, SEQUENCE, REFERENCE,
    STRAND, POSITION and CIGAR; an optional BAD column carries an upstream
    invalidity flag. Column order does not matter.
    """

    def __init__(
        self,
        path: Union[str, Path],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(path, logger)
        self.chunk_size = chunk_size

    def _chunks(self) -> Iterator[pd.DataFrame]:
        try:
            yield from pd.read_csv(
                self.path,
                sep="\t",
                dtype=str,
                keep_default_na=False,
                chunksize=self.chunk_size,
            )
        except pd.errors.EmptyDataError:
            raise FileFormatError(f"IR table has no header: {self.path}", path=self.path) from None
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise FileFormatError(f"Cannot parse IR table {self.path}: {e}", path=self.path) from e

    def _rows(self) -> Iterator[tuple[str, str, AlignmentRecord]]:
        line = 1  # header
        checked = False
        for chunk in self._chunks():
            if not checked:
                missing = [col for col in OUTPUT_COLUMNS if col not in chunk.columns]
                if missing:
                    raise FileFormatError(
                        f"IR table {self.path} is missing column(s): {', '.join(missing)}",
                        path=self.path,
                    )
                checked = True

            bad_flags = chunk[COL_BAD] if COL_BAD in chunk.columns else [""] * len(chunk)
            for group, name, read_no, sequence, reference, strand, position, cigar, bad in zip(
                chunk[COL_READ_GROUP],
                chunk[COL_FRAGMENT],
                chunk[COL_READNO],
                chunk[COL_SEQUENCE],
                chunk[COL_REFERENCE],
                chunk[COL_STRAND],
                chunk[COL_POSITION],
                chunk[COL_CIGAR],
                bad_flags,
            ):
                line += 1
                record = AlignmentRecord.from_fields(
                    read_no=_parse_int(read_no, COL_READNO, self.path, line),
                    sequence=sequence.strip(),
                    reference=reference.strip(),
                    strand=strand.strip(),
                    position=_parse_int(position, COL_POSITION, self.path, line, default=0),
                    cigar=cigar.strip(),
                    bad=bad.strip().lower() in TRUE_VALUES,
                )
                yield group, name, record

    def _records(self, payloads: list[AlignmentRecord]) -> list[AlignmentRecord]:
        return payloads


class AlignmentFileReader(FragmentReader):
    """Read fragments from a query-name grouped SAM/BAM/CRAM file.

    Secondary alignments are alternative candidates of their mate. When a
    secondary record omits its sequence, the primary record's sequence of
    the same mate is used, less the bases the secondary hard clips.
    Supplementary records are parts of a chimeric alignment rather than
    alternatives and are skipped unless requested.
    """

    def __init__(
        self,
        path: Union[str, Path],
        include_supplementary: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(path, logger)
        self.include_supplementary = include_supplementary

    def _rows(self) -> Iterator[tuple[str, str, pysam.AlignedSegment]]:
        try:
            alignment_file = pysam.AlignmentFile(str(self.path), "r", check_sq=False)
        except (OSError, ValueError) as e:
            raise FileFormatError(f"Cannot open alignment file {self.path}: {e}", path=self.path) from e

        with alignment_file:
            try:
                for segment in alignment_file.fetch(until_eof=True):
                    group = segment.get_tag("RG") if segment.has_tag("RG") else ""
                    yield str(group), segment.query_name, segment
            except (OSError, ValueError) as e:
                raise FileFormatError(f"Error reading {self.path}: {e}", path=self.path) from e

    @staticmethod
    def _read_sequence(segment: pysam.AlignedSegment) -> Optional[Sequence]:
        if not segment.query_sequence:
            return None
        sequence = Sequence(segment.query_sequence)
        # Stored reverse complemented on the reverse strand
        return sequence.reverse_complement() if segment.is_reverse else sequence

    def _records(self, payloads: list[pysam.AlignedSegment]) -> list[AlignmentRecord]:
        segments = []
        for segment in payloads:
            if segment.is_supplementary and not self.include_supplementary:
                self.skipped_supplementary += 1
                continue
            segments.append(segment)

        primary_sequences: dict[int, Sequence] = {}
        for segment in segments:
            sequence = self._read_sequence(segment)
            if sequence is not None and not segment.is_secondary and not segment.is_supplementary:
                primary_sequences.setdefault(self._read_no(segment), sequence)

        records = []
        for segment in segments:
            read_no = self._read_no(segment)
            sequence = self._read_sequence(segment)
            if sequence is None and read_no in primary_sequences:
                head, tail = self._hard_clips(segment)
                sequence = primary_sequences[read_no].sliced(head, tail)
            aligned = not segment.is_unmapped
            records.append(
                AlignmentRecord.from_fields(
                    read_no=read_no,
                    sequence=sequence if sequence is not None else Sequence(),
                    reference=segment.reference_name if aligned else "",
                    strand=("-" if segment.is_reverse else "+") if aligned else "",
                    position=segment.reference_start if aligned else 0,
                    cigar=(segment.cigarstring or "") if aligned else "",
                    bad=segment.is_qcfail or sequence is None,
                )
            )
        return records

    @staticmethod
    def _hard_clips(segment: pysam.AlignedSegment) -> tuple[int, int]:
        """Leading and trailing hard clips of a segment, in read orientation."""
        cigar = segment.cigartuples or []
        head = cigar[0][1] if cigar and cigar[0][0] == pysam.CHARD_CLIP else 0
        tail = cigar[-1][1] if len(cigar) > 1 and cigar[-1][0] == pysam.CHARD_CLIP else 0
        return (tail, head) if segment.is_reverse else (head, tail)

    @staticmethod
    def _read_no(segment: pysam.AlignedSegment) -> int:
        return 2 if segment.is_paired and segment.is_read2 else 1


def detect_format(path: Union[str, Path]) -> str:
    """Return ``"sam"`` for SAM/BAM/CRAM file names and ``"ir"`` otherwise."""
    return "sam" if Path(path).suffix.lower() in ALIGNMENT_SUFFIXES else "ir"


def open_reader(
    path: Union[str, Path],
    input_format: str = "auto",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    include_supplementary: bool = False,
    logger: Optional[logging.Logger] = None,
) -> FragmentReader:
    """Create the reader matching ``input_format`` (``auto``, ``ir`` or ``sam``).

    ``include_supplementary`` only applies to alignment files.
    """
    fmt = detect_format(path) if input_format == "auto" else input_format
    if fmt == "sam":
        return AlignmentFileReader(path, include_supplementary=include_supplementary, logger=logger)
    if fmt == "ir":
        return IRTableReader(path, chunk_size=chunk_size, logger=logger)
    raise ValueError(f"Unknown input format: {input_format}")
