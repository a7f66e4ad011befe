"""
Fragment classification.

Decides, per fragment, whether its alignment candidates form a trustworthy
alignment (ACCEPTED) or have to be set aside (DISCARDED). When a mate has
several candidates, a consensus record set is assembled: the first aligned,
unambiguous candidate of each mate becomes its canonical record and the
remaining candidates must either agree with it or be ambiguous.

Classification is a pure function of the fragment; discards are ordinary
outcomes, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import groupby
from operator import attrgetter
from typing import Optional, Sequence as SequenceType

from irfilter.core.models import AlignmentRecord, Fragment


class Outcome(Enum):
    ACCEPTED = "accepted"
    DISCARDED = "discarded"


class DiscardReason(Enum):
    """Why a fragment was discarded."""

    HARD_INVALID = "hard_invalid"  # a record is malformed or flagged bad
    NO_ALIGNMENT = "no_alignment"
    PARTIAL_ALIGNMENT = "partial_alignment"  # one candidate per mate, not all aligned
    UNRESOLVABLE_MATE = "unresolvable_mate"  # a mate has no aligned, unambiguous candidate
    CONFLICTING_EVIDENCE = "conflicting_evidence"


@dataclass(frozen=True)
class Verdict:
    """Classification result: the outcome plus the records to emit for it."""

    outcome: Outcome
    records: tuple[AlignmentRecord, ...]
    reason: Optional[DiscardReason] = None
    # True when the records are a consensus set rather than the input detail
    rewritten: bool = False

    @classmethod
    def accept(cls, records: SequenceType[AlignmentRecord], rewritten: bool = False) -> Verdict:
        return cls(Outcome.ACCEPTED, tuple(records), None, rewritten)

    @classmethod
    def discard(cls, records: SequenceType[AlignmentRecord], reason: DiscardReason) -> Verdict:
        return cls(Outcome.DISCARDED, tuple(records), reason)

    @property
    def accepted(self) -> bool:
        return self.outcome is Outcome.ACCEPTED


def count_mates(detail: SequenceType[AlignmentRecord]) -> int:
    """Number of read number runs in traversal order."""
    return sum(1 for _ in groupby(detail, key=attrgetter("read_no")))


def classify(fragment: Fragment) -> Verdict:
    """
    Classify a normalized fragment.

    Args:
        fragment: Fragment whose records are grouped by read number

    Returns:
        Verdict. Discards always carry the original records; acceptances
        carry either the original records or the assembled consensus set.
    """
    detail = tuple(fragment.detail)

    if any(record.bad or record.defect is not None for record in detail):
        return Verdict.discard(detail, DiscardReason.HARD_INVALID)

    aligned = sum(1 for record in detail if record.aligned)
    if aligned == 0:
        return Verdict.discard(detail, DiscardReason.NO_ALIGNMENT)

    reads = count_mates(detail)
    if len(detail) == reads:
        if aligned == reads:
            return Verdict.accept(detail)
        return Verdict.discard(detail, DiscardReason.PARTIAL_ALIGNMENT)

    consensus: list[AlignmentRecord] = []
    for _, run in groupby(detail, key=attrgetter("read_no")):
        records, reason = reconcile_mate(list(run))
        if reason is not None:
            return Verdict.discard(detail, reason)
        consensus.extend(records)
    return Verdict.accept(consensus, rewritten=True)


def reconcile_mate(
    group: list[AlignmentRecord],
) -> tuple[list[AlignmentRecord], Optional[DiscardReason]]:
    """
    Build the consensus records of one mate.

    Returns:
        Tuple of (records, None) on success, or ([], reason) when the whole
        fragment has to be discarded.
    """
    first_good = next((i for i, record in enumerate(group) if record.good), None)
    if first_good is None:
        return [], DiscardReason.UNRESOLVABLE_MATE

    if len(group) == 1:
        return [group[0]], None

    canonical = group[first_good]
    ambiguous = sum(1 for record in group if record.sequence.ambiguous())
    records = [canonical]
    for i, record in enumerate(group):
        if i == first_good or not record.aligned:
            continue
        if ambiguous > 0 and record.sequence.ambiguous():
            records.append(record.truncated())
        elif record.agrees_with(canonical):
            records.append(record)
        else:
            return [], DiscardReason.CONFLICTING_EVIDENCE
    return records, None
