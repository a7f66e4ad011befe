"""Utility functions (irfilter)."""

from irfilter.utils.logging import get_logger, setup_logging
from irfilter.utils.progress import iter_progress

__all__ = ["get_logger", "setup_logging", "iter_progress"]
