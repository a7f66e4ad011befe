"""Tests for fragment classification."""

import pytest

from irfilter.core.classify import (
    DiscardReason,
    Outcome,
    Verdict,
    classify,
    count_mates,
    reconcile_mate,
)
from irfilter.core.models import AlignmentRecord, Fragment
from irfilter.core.normalize import normalize
from irfilter.core.sequence import Sequence

READ = "ACGTACGT"
OTHER = "TTTTACGT"


def rec(read_no, bases=READ, aligned=True, bad=False, position=100, strand="+"):
    if not aligned:
        return AlignmentRecord(read_no=read_no, sequence=Sequence(bases), bad=bad)
    return AlignmentRecord(
        read_no=read_no,
        sequence=Sequence(bases),
        aligned=True,
        bad=bad,
        reference="chr1",
        strand=strand,
        position=position,
        cigar=f"{len(bases)}M",
    )


def frag(*records):
    return Fragment("RG1", "spot1", list(records))


class TestHardInvalid:
    def test_bad_record_discards_original_detail(self):
        fragment = frag(rec(1), rec(2, bad=True))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.DISCARDED
        assert verdict.reason is DiscardReason.HARD_INVALID
        assert verdict.records == tuple(fragment.detail)

    def test_bad_record_wins_over_consensus(self):
        fragment = frag(rec(1), rec(1, bad=True), rec(2))
        verdict = classify(fragment)
        assert verdict.reason is DiscardReason.HARD_INVALID
        assert verdict.records == tuple(fragment.detail)

    def test_cigar_not_covering_sequence_is_invalid(self):
        broken = AlignmentRecord(1, Sequence("ACGTACGN"), True, False, "chr1", "+", 1, "")
        fragment = frag(rec(1), broken, rec(2))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.DISCARDED
        assert verdict.reason is DiscardReason.HARD_INVALID
        assert verdict.records == tuple(fragment.detail)


class TestNoAlignment:
    def test_nothing_aligned(self):
        fragment = frag(rec(1, aligned=False), rec(2, aligned=False))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.DISCARDED
        assert verdict.reason is DiscardReason.NO_ALIGNMENT
        assert verdict.records == tuple(fragment.detail)

    def test_two_unaligned_candidates_of_one_mate(self):
        verdict = classify(frag(rec(1, aligned=False), rec(1, aligned=False)))
        assert verdict.outcome is Outcome.DISCARDED


class TestSimpleCase:
    def test_both_mates_aligned(self):
        fragment = frag(rec(1), rec(2))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.ACCEPTED
        assert verdict.accepted is True
        assert verdict.reason is None
        assert verdict.rewritten is False
        assert verdict.records == tuple(fragment.detail)

    def test_ambiguous_single_candidates_are_not_rewritten(self):
        fragment = frag(rec(1, bases="ACGTACGN"), rec(2))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.ACCEPTED
        assert verdict.records[0].sequence == Sequence("ACGTACGN")

    def test_partial_alignment(self):
        fragment = frag(rec(1), rec(2, aligned=False))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.DISCARDED
        assert verdict.reason is DiscardReason.PARTIAL_ALIGNMENT
        assert verdict.records == tuple(fragment.detail)

    def test_unpaired_read(self):
        verdict = classify(frag(rec(1)))
        assert verdict.outcome is Outcome.ACCEPTED


class TestConsensus:
    def test_ambiguous_sibling_is_truncated(self):
        ambiguous = rec(1, bases="ACGTACGN")
        good = rec(1)
        mate = rec(2, bases="GGGGCCCC")
        verdict = classify(frag(ambiguous, good, mate))

        assert verdict.outcome is Outcome.ACCEPTED
        assert verdict.rewritten is True
        assert len(verdict.records) == 3
        assert verdict.records[0] is good
        assert verdict.records[1] == ambiguous.truncated()
        assert verdict.records[1].sequence == Sequence("ACGTACG")
        assert verdict.records[1].cigar == "7M1H"
        assert verdict.records[2] is mate

    def test_conflicting_candidates_discard_fragment(self):
        fragment = frag(rec(1), rec(1, bases=OTHER))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.DISCARDED
        assert verdict.reason is DiscardReason.CONFLICTING_EVIDENCE
        assert verdict.records == tuple(fragment.detail)

    def test_conflict_in_second_mate_discards_whole_fragment(self):
        fragment = frag(rec(1), rec(1, position=300), rec(2), rec(2, bases=OTHER))
        verdict = classify(fragment)
        assert verdict.reason is DiscardReason.CONFLICTING_EVIDENCE
        assert verdict.records == tuple(fragment.detail)

    def test_mate_without_good_candidate(self):
        fragment = frag(rec(1, bases="NCGTACGT"), rec(1, bases="ACGTACGN"), rec(2))
        verdict = classify(fragment)
        assert verdict.outcome is Outcome.DISCARDED
        assert verdict.reason is DiscardReason.UNRESOLVABLE_MATE
        assert verdict.records == tuple(fragment.detail)

    def test_unaligned_singleton_mate_voids_fragment(self):
        fragment = frag(rec(1), rec(1, position=500), rec(2, aligned=False))
        verdict = classify(fragment)
        assert verdict.reason is DiscardReason.UNRESOLVABLE_MATE

    def test_unaligned_sibling_is_dropped(self):
        good = rec(1)
        verdict = classify(frag(rec(1, aligned=False), good, rec(2)))
        assert verdict.outcome is Outcome.ACCEPTED
        assert [r.read_no for r in verdict.records] == [1, 2]
        assert verdict.records[0] is good

    def test_equivalent_duplicate_is_kept_unchanged(self):
        good = rec(1)
        duplicate = rec(1, bases="ACGTNCGT", position=900)
        other = rec(1, position=400)
        verdict = classify(frag(good, duplicate, other))
        assert verdict.outcome is Outcome.ACCEPTED
        # Internal ambiguity cannot be trimmed away
        assert verdict.records == (good, duplicate, other)

    def test_confident_disagreement_despite_ambiguous_group(self):
        fragment = frag(rec(1), rec(1, bases="ACGTACGN"), rec(1, bases=OTHER))
        verdict = classify(fragment)
        assert verdict.reason is DiscardReason.CONFLICTING_EVIDENCE

    def test_canonical_is_first_good_candidate(self):
        first = rec(1, position=10)
        second = rec(1, position=20)
        verdict = classify(frag(rec(1, bases="ACGTACGN"), first, second))
        assert verdict.records[0] is first
        assert verdict.records[2] is second

    def test_group_count_never_increases(self):
        fragment = frag(rec(1), rec(1, position=5), rec(2), rec(2, aligned=False), rec(3))
        verdict = classify(fragment)
        assert verdict.accepted
        assert count_mates(verdict.records) == count_mates(fragment.detail) == 3

    def test_fragment_is_not_mutated(self):
        records = [rec(1, bases="ACGTACGN"), rec(1), rec(2)]
        fragment = frag(*records)
        classify(fragment)
        assert fragment.detail == records


def test_reclassifying_consensus_is_stable():
    fragment = frag(rec(1, aligned=False), rec(1), rec(2))
    verdict = classify(normalize(fragment))
    assert verdict.accepted

    again = classify(normalize(Fragment(fragment.group, fragment.name, list(verdict.records))))
    assert again.outcome is Outcome.ACCEPTED
    assert again.rewritten is False
    assert again.records == verdict.records


@pytest.mark.parametrize(
    "records",
    [
        [rec(2), rec(1)],
        [rec(1, aligned=False), rec(2), rec(1)],
        [rec(2, bases="ACGTACGN"), rec(1), rec(2)],
    ],
)
def test_accepted_records_follow_mate_order(records):
    verdict = classify(normalize(frag(*records)))
    assert verdict.accepted
    read_numbers = [r.read_no for r in verdict.records]
    assert read_numbers == sorted(read_numbers)


def test_reconcile_mate_single_good_record():
    good = rec(1)
    assert reconcile_mate([good]) == ([good], None)


def test_reconcile_mate_reports_reason():
    records, reason = reconcile_mate([rec(1), rec(1, bases=OTHER)])
    assert records == []
    assert reason is DiscardReason.CONFLICTING_EVIDENCE


def test_verdict_constructors():
    record = rec(1)
    accepted = Verdict.accept([record], rewritten=True)
    assert accepted.records == (record,)
    assert accepted.rewritten is True

    discarded = Verdict.discard([record], DiscardReason.NO_ALIGNMENT)
    assert discarded.accepted is False
    assert discarded.reason is DiscardReason.NO_ALIGNMENT


def test_reclassifying_truncated_consensus_is_stable():
    fragment = frag(rec(1, bases="ACGTACGN"), rec(1), rec(2, bases="GGGGCCCC"))
    verdict = classify(normalize(fragment))
    assert [(str(r.sequence), r.cigar) for r in verdict.records] == [
        ("ACGTACGT", "8M"),
        ("ACGTACG", "7M1H"),
        ("GGGGCCCC", "8M"),
    ]

    again = classify(normalize(Fragment(fragment.group, fragment.name, list(verdict.records))))
    assert again.outcome is Outcome.ACCEPTED
    assert again.records == verdict.records


def test_clipped_candidate_must_match_its_part_of_the_read():
    canonical = rec(1)
    clipped = AlignmentRecord(1, Sequence("ACGTACG"), True, False, "chr1", "+", 300, "7M1H")
    shifted = AlignmentRecord(1, Sequence("CGTACGT"), True, False, "chr1", "+", 300, "7M1H")
    assert classify(frag(canonical, clipped)).accepted
    assert classify(frag(canonical, shifted)).reason is DiscardReason.CONFLICTING_EVIDENCE
