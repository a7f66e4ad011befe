"""Unified constants for irfilter.

Column and table names shared by the readers, the writer and the CLI.
"""

# ================== Table Columns ==================
# Column order of both the IR input table and the two output tables.

COL_READ_GROUP: str = "READ_GROUP"
COL_FRAGMENT: str = "FRAGMENT"
COL_READNO: str = "READNO"
COL_SEQUENCE: str = "SEQUENCE"
COL_REFERENCE: str = "REFERENCE"
COL_STRAND: str = "STRAND"
COL_POSITION: str = "POSITION"
COL_CIGAR: str = "CIGAR"

# Optional upstream invalidity flag in IR input tables
COL_BAD: str = "BAD"

OUTPUT_COLUMNS: list[str] = [
    COL_READ_GROUP,
    COL_FRAGMENT,
    COL_READNO,
    COL_SEQUENCE,
    COL_REFERENCE,
    COL_STRAND,
    COL_POSITION,
    COL_CIGAR,
]


# ================== Sequence Alphabet ==================

# Base calls that are not ambiguity codes
CONFIDENT_BASES: frozenset[str] = frozenset("ACGT")

# Strand symbols accepted on aligned records
STRANDS: frozenset[str] = frozenset("+-")

# Values read as "true" in the optional BAD column
TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "t", "yes", "y"})


# ================== Output Constants ==================

# Output table file names are "{prefix}.{suffix}"
ACCEPTED_SUFFIX: str = "accepted.tsv"
DISCARDED_SUFFIX: str = "discarded.tsv"

# Rows buffered per destination before a flush
DEFAULT_CHUNK_SIZE: int = 10000

# Values written in place of aligned-only columns for unaligned records
DEFAULT_UNALIGNED_VALUES: dict[str, object] = {
    "reference": "",
    "strand": "",
    "position": 0,
    "cigar": "",
}
