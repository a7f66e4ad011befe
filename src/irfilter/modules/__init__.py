"""Processing modules: input readers, output tables and the filtering driver."""

from irfilter.modules.base import ModuleBase, ModuleResult
from irfilter.modules.fragment_filter import FilterStats, FragmentFilter
from irfilter.modules.readers import AlignmentFileReader, IRTableReader, open_reader
from irfilter.modules.writers import Destination, TableWriter, emit

__all__ = [
    "AlignmentFileReader",
    "Destination",
    "FilterStats",
    "FragmentFilter",
    "IRTableReader",
    "ModuleBase",
    "ModuleResult",
    "TableWriter",
    "emit",
    "open_reader",
]
