"""Validation utilities for irfilter."""

from __future__ import annotations

import importlib
from typing import List


def validate_installation() -> List[str]:
    """
    Validate irfilter installation and dependencies.

    Returns:
        List of validation issues (empty if all good)
    """
    issues = []

    # Import name differs from the distribution name for some of these
    required_modules = {
        "pandas": "pandas",
        "pysam": "pysam",
        "biopython": "Bio",
        "pyyaml": "yaml",
        "click": "click",
        "tqdm": "tqdm",
    }
    for distribution, module in required_modules.items():
        try:
            importlib.import_module(module)
        except ImportError:
            issues.append(f"Missing Python module: {distribution}")

    try:
        from irfilter.config import Config  # noqa: F401
        from irfilter.core.classify import classify  # noqa: F401
        from irfilter.modules.fragment_filter import FragmentFilter  # noqa: F401
    except ImportError as e:
        issues.append(f"irfilter module import error: {e}")

    return issues
