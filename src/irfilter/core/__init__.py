"""Core data model and classification logic."""

from irfilter.core.classify import DiscardReason, Outcome, Verdict, classify, reconcile_mate
from irfilter.core.models import AlignmentRecord, Fragment
from irfilter.core.normalize import normalize
from irfilter.core.sequence import Sequence

__all__ = [
    "AlignmentRecord",
    "DiscardReason",
    "Fragment",
    "Outcome",
    "Sequence",
    "Verdict",
    "classify",
    "normalize",
    "reconcile_mate",
]
