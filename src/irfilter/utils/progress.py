"""Progress helpers (tqdm integration)."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, TypeVar

from tqdm import tqdm

T = TypeVar("T")


def iter_progress(
    iterable: Iterable[T],
    total: Optional[int] = None,
    desc: Optional[str] = None,
    unit: str = "it",
    enabled: bool = True,
) -> Iterator[T]:
    """Wrap iterable with tqdm if enabled, else return it as-is."""
    if not enabled:
        return iter(iterable)

    formatted_desc = f"· {desc:<12} " if desc else ""
    if total is None:
        bar_format = "{desc}: {n_fmt} {unit} [{elapsed}, {rate_fmt}]"
    else:
        bar_format = "{desc}: {percentage:3.0f}%|{bar:30}| {n_fmt}/{total_fmt}"
    return iter(
        tqdm(
            iterable,
            total=total,
            desc=formatted_desc,
            unit=unit,
            bar_format=bar_format,
            ncols=80,
        )
    )
