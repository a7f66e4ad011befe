"""Version information for irfilter."""

__version__ = "1.0.0"
__author__ = "irfilter developers"
__license__ = "GPL-2.0"
__description__ = "Consensus filtering of aligned sequencing fragments into accepted and discarded tables"
