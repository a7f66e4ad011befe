"""Sequence value type used by the fragment classifier."""

from __future__ import annotations

from dataclasses import dataclass

from Bio.Data.IUPACData import ambiguous_dna_values
from Bio.Seq import reverse_complement

from irfilter.constants import CONFIDENT_BASES


def _compatible(a: str, b: str) -> bool:
    if a == b:
        return True
    return bool(set(ambiguous_dna_values.get(a, "")) & set(ambiguous_dna_values.get(b, "")))


@dataclass(frozen=True)
class Sequence:
    """Base calls of one read, upper-cased on construction.

    A position is confident when it is one of ``ACGT``; anything else
    (IUPAC ambiguity codes, ``N``, ``.``) makes the sequence ambiguous.
    """

    bases: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "bases", self.bases.upper())

    def __str__(self) -> str:
        return self.bases

    def __len__(self) -> int:
        return len(self.bases)

    def ambiguous(self) -> bool:
        return any(base not in CONFIDENT_BASES for base in self.bases)

    def is_equivalent_to(self, other: Sequence) -> bool:
        """True if both sequences can represent the same read content.

        Sequences must have equal length and, position by position, the
        IUPAC base sets of the two calls must overlap.
        """
        if len(self.bases) != len(other.bases):
            return False
        return all(_compatible(a, b) for a, b in zip(self.bases, other.bases))

    def confident_span(self) -> tuple[int, int]:
        """Return counts of leading and trailing ambiguous positions."""
        head = 0
        while head < len(self.bases) and self.bases[head] not in CONFIDENT_BASES:
            head += 1
        if head == len(self.bases):
            return head, 0
        tail = 0
        while self.bases[len(self.bases) - 1 - tail] not in CONFIDENT_BASES:
            tail += 1
        return head, tail

    def sliced(self, head: int, tail: int) -> Sequence:
        return Sequence(self.bases[head : len(self.bases) - tail])

    def reverse_complement(self) -> Sequence:
        return Sequence(reverse_complement(self.bases))
