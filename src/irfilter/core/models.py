"""
Data model for fragment filtering.

A Fragment holds every alignment candidate reported for one sequencing spot
(one read, or both mates of a pair). Each candidate is an AlignmentRecord;
placement fields are only meaningful when ``aligned`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from irfilter.constants import STRANDS
from irfilter.core.cigar import format_cigar, hard_clips, parse_cigar, query_length, trim_query
from irfilter.core.sequence import Sequence
from irfilter.exceptions import CigarError


@dataclass(frozen=True)
class AlignmentRecord:
    """One candidate placement (or non-placement) of one mate."""

    read_no: int
    sequence: Sequence
    aligned: bool = False
    bad: bool = False
    reference: str = ""
    strand: str = ""
    position: int = 0
    cigar: str = ""

    @property
    def good(self) -> bool:
        """Aligned with no ambiguous base calls."""
        return self.aligned and not self.sequence.ambiguous()

    @property
    def defect(self) -> Optional[str]:
        return record_defect(self.read_no, self.sequence, self.aligned, self.strand, self.cigar)

    def read_clips(self) -> tuple[int, int]:
        """Hard clipped bases before and after the sequence, in read orientation."""
        if not self.aligned:
            return 0, 0
        try:
            head, tail = hard_clips(parse_cigar(self.cigar))
        except CigarError:
            return 0, 0
        return (tail, head) if self.strand == "-" else (head, tail)

    def sort_key(self) -> tuple:
        """Full ordering: mate first, then good, then aligned, then unclipped candidates."""
        return (
            self.read_no,
            not self.good,
            not self.aligned,
            sum(self.read_clips()),
            self.reference,
            self.position,
            self.strand,
            self.cigar,
            self.sequence.bases,
        )

    def agrees_with(self, other: AlignmentRecord) -> bool:
        """True if both records can carry the same read.

        Hard clipped records are compared on the part of the read they share,
        after placing both sequences at their offset within the full read.
        """
        if self.sequence.is_equivalent_to(other.sequence):
            return True
        head, tail = self.read_clips()
        other_head, other_tail = other.read_clips()
        end = head + len(self.sequence)
        other_end = other_head + len(other.sequence)
        if end + tail != other_end + other_tail:
            return False
        start, stop = max(head, other_head), min(end, other_end)
        if start >= stop:
            return False
        return self.sequence.sliced(start - head, end - stop).is_equivalent_to(
            other.sequence.sliced(start - other_head, other_end - stop)
        )

    def truncated(self) -> AlignmentRecord:
        """Return a copy with ambiguous sequence ends hard clipped away.

        The sequence is stored in read orientation, so on the reverse strand
        the start of the read corresponds to the end of the CIGAR. Records
        whose CIGAR does not describe the sequence are returned unchanged.
        """
        if not self.aligned:
            return self
        head, tail = self.sequence.confident_span()
        if head + tail == 0 or head == len(self.sequence):
            return self

        cigar_head, cigar_tail = (tail, head) if self.strand == "-" else (head, tail)
        try:
            ops, shift = trim_query(parse_cigar(self.cigar), cigar_head, cigar_tail)
        except CigarError:
            return self
        return replace(
            self,
            sequence=self.sequence.sliced(head, tail),
            cigar=format_cigar(ops),
            position=self.position + shift,
        )

    @classmethod
    def from_fields(
        cls,
        read_no: int,
        sequence: Union[str, Sequence],
        reference: str = "",
        strand: str = "",
        position: int = 0,
        cigar: str = "",
        bad: bool = False,
    ) -> AlignmentRecord:
        """Build a record from raw column values.

        ``aligned`` is derived from the presence of a reference and a CIGAR;
        ``bad`` is raised for records that cannot be trusted (see
        :func:`record_defect`) in addition to any upstream flag.
        """
        if not isinstance(sequence, Sequence):
            sequence = Sequence(sequence)
        aligned = bool(reference) and cigar not in ("", "*")
        defect = record_defect(read_no, sequence, aligned, strand, cigar)
        return cls(
            read_no=read_no,
            sequence=sequence,
            aligned=aligned,
            bad=bad or defect is not None,
            reference=reference if aligned else "",
            strand=strand if aligned else "",
            position=position if aligned else 0,
            cigar=cigar if aligned else "",
        )


def record_defect(
    read_no: int, sequence: Sequence, aligned: bool, strand: str, cigar: str
) -> Optional[str]:
    """Describe why a record is invalid, or return None if it is usable."""
    if read_no < 1:
        return f"read number must be >= 1, got {read_no}"
    if not aligned:
        return None
    if strand not in STRANDS:
        return f"invalid strand {strand!r}"
    try:
        ops = parse_cigar(cigar)
    except CigarError as e:
        return str(e)
    if query_length(ops) != len(sequence):
        return f"CIGAR {cigar} covers {query_length(ops)} bases, sequence has {len(sequence)}"
    return None


@dataclass
class Fragment:
    """All alignment candidates of one spot."""

    group: str
    name: str
    detail: list[AlignmentRecord] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.detail
