"""irfilter: split aligned sequencing fragments into accepted and discarded records."""

from irfilter.__version__ import __version__, __author__, __license__, __description__
from irfilter.core.classify import DiscardReason, Outcome, Verdict, classify
from irfilter.core.models import AlignmentRecord, Fragment
from irfilter.core.normalize import normalize
from irfilter.core.sequence import Sequence

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "AlignmentRecord",
    "DiscardReason",
    "Fragment",
    "Outcome",
    "Sequence",
    "Verdict",
    "classify",
    "normalize",
]
