"""
CIGAR helpers.

Only the small amount of CIGAR arithmetic the classifier needs: parsing,
formatting, consumed lengths and hard clipping query bases off either end.
Operations are kept as ``(length, op)`` tuples in string order.
"""

from __future__ import annotations

import re

from irfilter.exceptions import CigarError

CIGAR_OPS = "MIDNSHP=X"

# Operations consuming query / reference bases (SAM v1 section 1.4.6)
QUERY_OPS = frozenset("MIS=X")
REFERENCE_OPS = frozenset("MDN=X")

_CIGAR_RE = re.compile(r"(?:\d+[MIDNSHP=X])+")
_CIGAR_TOKEN = re.compile(r"(\d+)([MIDNSHP=X])")

CigarOps = list[tuple[int, str]]


def parse_cigar(text: str) -> CigarOps:
    """Parse a CIGAR string; ``"*"`` and ``""`` mean no CIGAR."""
    if text in ("", "*"):
        return []
    if not _CIGAR_RE.fullmatch(text):
        raise CigarError(f"Malformed CIGAR string: {text!r}", cigar=text)

    ops: CigarOps = []
    for length, op in _CIGAR_TOKEN.findall(text):
        if int(length) == 0:
            raise CigarError(f"Zero-length operation in CIGAR: {text!r}", cigar=text)
        ops.append((int(length), op))
    return ops


def format_cigar(ops: CigarOps) -> str:
    """Format operations back to text, merging adjacent identical operations."""
    merged: CigarOps = []
    for length, op in ops:
        if merged and merged[-1][1] == op:
            merged[-1] = (merged[-1][0] + length, op)
        else:
            merged.append((length, op))
    if not merged:
        return "*"
    return "".join(f"{length}{op}" for length, op in merged)


def query_length(ops: CigarOps) -> int:
    return sum(length for length, op in ops if op in QUERY_OPS)


def reference_length(ops: CigarOps) -> int:
    return sum(length for length, op in ops if op in REFERENCE_OPS)


def hard_clips(ops: CigarOps) -> tuple[int, int]:
    """Return the leading and trailing hard clip lengths (CIGAR order)."""
    if not ops:
        return 0, 0
    head = ops[0][0] if ops[0][1] == "H" else 0
    tail = ops[-1][0] if len(ops) > 1 and ops[-1][1] == "H" else 0
    return head, tail


def _clip_leading(ops: CigarOps, count: int) -> tuple[CigarOps, int]:
    """Hard clip ``count`` query bases from the start of ``ops``.

    Returns the new operations and the number of reference bases that were
    consumed by the removed part.
    """
    hard = 0
    shift = 0
    index = 0
    while index < len(ops) and ops[index][1] == "H":
        hard += ops[index][0]
        index += 1

    rest = list(ops[index:])
    left = count
    # Deletions left at the new start no longer anchor anything
    while rest and (left > 0 or (count and rest[0][1] in "DNP")):
        length, op = rest[0]
        if op in QUERY_OPS:
            take = min(length, left)
            left -= take
            hard += take
            if op in REFERENCE_OPS:
                shift += take
            if take < length:
                rest[0] = (length - take, op)
                continue
        elif op in REFERENCE_OPS:
            shift += length
        elif op == "H":
            hard += length
        rest.pop(0)

    if hard:
        rest.insert(0, (hard, "H"))
    return rest, shift


def trim_query(ops: CigarOps, head: int, tail: int) -> tuple[CigarOps, int]:
    """
    Replace ``head`` leading and ``tail`` trailing query bases by hard clips.

    Args:
        ops: Parsed CIGAR operations
        head: Query bases to remove from the start (CIGAR order)
        tail: Query bases to remove from the end (CIGAR order)

    Returns:
        Tuple of (new operations, reference bases removed at the start).
        The caller moves the alignment position forward by the second value.
    """
    if head + tail >= query_length(ops):
        raise CigarError(
            f"Cannot clip {head}+{tail} bases from a {query_length(ops)} base query",
            cigar=format_cigar(ops),
        )
    clipped, shift = _clip_leading(ops, head)
    reversed_ops, _ = _clip_leading(clipped[::-1], tail)
    return reversed_ops[::-1], shift
