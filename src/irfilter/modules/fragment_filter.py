"""
Fragment Filter - accepted/discarded split of aligned fragments

Drives a filtering run: fragments are pulled from the input file, brought
into mate order, classified and written to the accepted or discarded table.

Key features:
- IR tables and SAM/BAM/CRAM input
- Per-reason discard statistics
- tqdm progress over fragments
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from irfilter.config import Config
from irfilter.core.classify import DiscardReason, Verdict, classify
from irfilter.core.models import Fragment
from irfilter.core.normalize import normalize
from irfilter.modules.base import ModuleBase, ModuleResult
from irfilter.modules.readers import detect_format, open_reader
from irfilter.modules.writers import TableWriter, emit
from irfilter.utils.logging import LogTemplates
from irfilter.utils.progress import iter_progress


@dataclass
class FilterStats:
    """Statistics for a filtering run."""

    fragments: int = 0
    empty_fragments: int = 0
    accepted_fragments: int = 0
    discarded_fragments: int = 0
    accepted_rows: int = 0
    discarded_rows: int = 0
    rewritten_fragments: int = 0
    discard_reasons: Counter = field(default_factory=Counter)

    @property
    def accepted_percentage(self) -> float:
        classified = self.accepted_fragments + self.discarded_fragments
        if classified == 0:
            return 0.0
        return (self.accepted_fragments / classified) * 100

    def record(self, verdict: Verdict, rows: int) -> None:
        if verdict.accepted:
            self.accepted_fragments += 1
            self.accepted_rows += rows
            if verdict.rewritten:
                self.rewritten_fragments += 1
        else:
            self.discarded_fragments += 1
            self.discarded_rows += rows
            self.discard_reasons[verdict.reason] += 1

    def as_metrics(self) -> dict[str, Any]:
        metrics: dict[str, Any] = {
            "fragments": self.fragments,
            "empty_fragments": self.empty_fragments,
            "accepted_fragments": self.accepted_fragments,
            "discarded_fragments": self.discarded_fragments,
            "accepted_rows": self.accepted_rows,
            "discarded_rows": self.discarded_rows,
            "rewritten_fragments": self.rewritten_fragments,
        }
        for reason in DiscardReason:
            metrics[f"discarded_{reason.value}"] = self.discard_reasons.get(reason, 0)
        return metrics


class FragmentFilter(ModuleBase):
    """Split the fragments of one input file into accepted and discarded tables."""

    def __init__(
        self,
        config: Optional[Config] = None,
        logger: Optional[logging.Logger] = None,
        debug: bool = False,
    ) -> None:
        super().__init__(name="fragment_filter", logger=logger, debug=debug)
        self.config = config or Config()
        self.stats = FilterStats()

    def _resolve(self, **kwargs: Any) -> Config:
        """Apply per-run overrides on top of the configured values."""
        overrides = {
            key: value
            for key, value in kwargs.items()
            if key in {"input_file", "output_dir", "prefix", "input_format"} and value is not None
        }
        for key in ("input_file", "output_dir"):
            if key in overrides:
                overrides[key] = Path(overrides[key])
        return replace(self.config, **overrides)

    def validate_inputs(self, **kwargs: Any) -> bool:
        cfg = self._resolve(**kwargs)
        cfg.validate()
        self.validate_input_file(cfg.input_file, self._input_format(cfg))
        self.validate_output_paths(cfg.input_file, [cfg.accepted_path, cfg.discarded_path])
        return True

    @staticmethod
    def _input_format(cfg: Config) -> str:
        return detect_format(cfg.input_file) if cfg.input_format == "auto" else cfg.input_format

    def process_fragment(self, fragment: Fragment, writer: TableWriter) -> Optional[Verdict]:
        """Normalize, classify and emit one fragment; empty fragments are skipped."""
        self.stats.fragments += 1
        if fragment.empty:
            self.stats.empty_fragments += 1
            return None

        verdict = classify(normalize(fragment))
        rows = emit(writer, fragment, verdict)
        self.stats.record(verdict, rows)
        if not verdict.accepted:
            self.logger.debug(
                f"Discarded {fragment.group}/{fragment.name}: {verdict.reason.value}"
            )
        return verdict

    def process(self, fragments: Iterable[Fragment], writer: TableWriter) -> FilterStats:
        """Run the pull-classify-push loop over ``fragments``."""
        for fragment in iter_progress(
            fragments,
            desc="fragments",
            unit="frag",
            enabled=self.config.runtime.enable_progress,
        ):
            self.process_fragment(fragment, writer)
        return self.stats

    def execute(
        self,
        input_file: Optional[Union[str, Path]] = None,
        output_dir: Optional[Union[str, Path]] = None,
        prefix: Optional[str] = None,
        input_format: Optional[str] = None,
    ) -> ModuleResult:
        cfg = self._resolve(
            input_file=input_file, output_dir=output_dir, prefix=prefix, input_format=input_format
        )
        self.validate_output_dir(cfg.output_dir)
        self.stats = FilterStats()

        fmt = self._input_format(cfg)
        self.logger.info(LogTemplates.RUN_START.format(path=cfg.input_file, fmt=fmt))

        reader = open_reader(
            cfg.input_file,
            fmt,
            chunk_size=cfg.output.chunk_size,
            include_supplementary=cfg.include_supplementary,
            logger=self.logger,
        )
        writer = TableWriter(
            cfg.accepted_path,
            cfg.discarded_path,
            defaults=cfg.unaligned_defaults(),
            chunk_size=cfg.output.chunk_size,
            logger=self.logger,
        )
        with writer:
            self.process(reader, writer)

        self._log_summary(reader.records_read)
        if reader.skipped_supplementary:
            self.logger.info(f"Skipped {reader.skipped_supplementary:,} supplementary records")

        result = ModuleResult(success=True, module_name=self.name)
        result.add_output("accepted", cfg.accepted_path)
        result.add_output("discarded", cfg.discarded_path)
        result.add_metric("records", reader.records_read)
        result.add_metric("skipped_supplementary", reader.skipped_supplementary)
        for key, value in self.stats.as_metrics().items():
            result.add_metric(key, value)
        if self.stats.fragments == 0:
            result.add_warning(f"No fragments found in {cfg.input_file}")
        return result

    def _log_summary(self, records: int) -> None:
        stats = self.stats
        self.logger.info("=" * 60)
        self.logger.info(f"Read {records:,} records in {stats.fragments:,} fragments")
        if stats.empty_fragments:
            self.logger.info(f"Skipped {stats.empty_fragments:,} empty fragments")
        self.logger.info(
            LogTemplates.FILTERING_STATS.format(
                kept=stats.accepted_fragments,
                removed=stats.discarded_fragments,
                percent=stats.accepted_percentage,
            )
        )
        self.logger.info(f"Consensus rewritten: {stats.rewritten_fragments:,}")
        for reason in DiscardReason:
            count = stats.discard_reasons.get(reason, 0)
            if count:
                self.logger.info(LogTemplates.DISCARD_REASON.format(reason=reason.value, count=count))
        self.logger.info("=" * 60)
