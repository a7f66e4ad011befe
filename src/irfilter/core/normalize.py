"""Bring the records of a fragment into mate order."""

from __future__ import annotations

from irfilter.core.models import AlignmentRecord, Fragment


def normalize(fragment: Fragment) -> Fragment:
    """
    Reorder ``fragment.detail`` in place so each read number forms one run.

    Two records are only swapped into ascending read number order; the full
    ordering of :meth:`AlignmentRecord.sort_key` is applied (stably) only to
    larger fragments, so two-record fragments keep their original order
    between candidates of the same mate.

    Returns:
        The same fragment, for chaining.
    """
    detail = fragment.detail
    if len(detail) < 2:
        return fragment

    if len(detail) == 2:
        if detail[1].read_no < detail[0].read_no:
            detail[0], detail[1] = detail[1], detail[0]
        return fragment

    detail.sort(key=AlignmentRecord.sort_key)
    return fragment
