"""Pytest configuration for irfilter tests."""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to Python path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from irfilter.constants import OUTPUT_COLUMNS  # noqa: E402


@pytest.fixture(autouse=True)
def reset_logging_after_test():
    """Reset irfilter logger state after each test.

    setup_logging() sets propagate=False, which breaks caplog in later tests.
    """
    yield
    app_logger = logging.getLogger("irfilter")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def write_ir_table(tmp_path):
    """Write an IR table from row tuples and return its path."""

    def _write(rows, name="input.tsv", columns=None):
        columns = columns or OUTPUT_COLUMNS
        lines = ["\t".join(columns)]
        lines.extend("\t".join(str(value) for value in row) for row in rows)
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write
