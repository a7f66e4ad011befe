"""Fixtures for CLI integration tests."""

import pytest

from irfilter.constants import OUTPUT_COLUMNS


@pytest.fixture
def ir_input(tmp_path):
    rows = [
        ("RG1", "good", "1", "ACGTACGT", "chr1", "+", "100", "8M"),
        ("RG1", "good", "2", "GGGGCCCC", "chr1", "-", "300", "8M"),
        ("RG1", "half", "1", "ACGTACGT", "chr1", "+", "100", "8M"),
        ("RG1", "half", "2", "GGGGCCCC", "", "", "", ""),
    ]
    path = tmp_path / "fragments.tsv"
    path.write_text("\n".join("\t".join(row) for row in [tuple(OUTPUT_COLUMNS)] + rows) + "\n")
    return path
