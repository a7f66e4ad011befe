"""Configuration management for irfilter."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from irfilter.constants import (
    ACCEPTED_SUFFIX,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_UNALIGNED_VALUES,
    DISCARDED_SUFFIX,
)
from irfilter.exceptions import ConfigurationError

INPUT_FORMATS = ("auto", "ir", "sam")


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    # Enable tqdm progress where available
    enable_progress: bool = True


@dataclass
class OutputConfig:
    """Output table configuration."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    # Values written to REFERENCE/STRAND/POSITION/CIGAR of unaligned records
    defaults: Dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_UNALIGNED_VALUES))


@dataclass
class Config:
    """Main configuration class."""

    input_file: Optional[Path] = None
    output_dir: Path = Path("irfilter_output")
    prefix: str = "fragments"
    input_format: str = "auto"
    # Keep supplementary (chimeric part) records of alignment files
    include_supplementary: bool = False

    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def accepted_path(self) -> Path:
        return self.output_dir / f"{self.prefix}.{ACCEPTED_SUFFIX}"

    @property
    def discarded_path(self) -> Path:
        return self.output_dir / f"{self.prefix}.{DISCARDED_SUFFIX}"

    def validate(self) -> None:
        """Validate configuration."""
        if not self.input_file:
            raise ConfigurationError("Input file is required")
        if not Path(self.input_file).exists():
            raise ConfigurationError(f"Input file not found: {self.input_file}")
        if self.input_format not in INPUT_FORMATS:
            raise ConfigurationError(
                f"Unknown input_format {self.input_format!r}; expected one of {', '.join(INPUT_FORMATS)}"
            )
        if not self.prefix:
            raise ConfigurationError("Output prefix must not be empty")
        if self.output.chunk_size < 1:
            raise ConfigurationError("output.chunk_size must be >= 1")

        unknown = set(self.output.defaults) - set(DEFAULT_UNALIGNED_VALUES)
        if unknown:
            raise ConfigurationError(
                "Unknown output.defaults key(s): " + ", ".join(sorted(unknown))
            )
        position = self.output.defaults.get("position", 0)
        if not isinstance(position, int) or isinstance(position, bool):
            raise ConfigurationError(f"output.defaults.position must be an integer, got {position!r}")

    def unaligned_defaults(self) -> Dict[str, Any]:
        """Defaults for all four aligned-only columns, config values taking precedence."""
        return {**DEFAULT_UNALIGNED_VALUES, **self.output.defaults}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""

        def path_to_str(obj):
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: path_to_str(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [path_to_str(item) for item in obj]
            return obj

        return path_to_str(asdict(self))


KNOWN_KEYS = {
    "input_file",
    "output_dir",
    "prefix",
    "input_format",
    "include_supplementary",
    "runtime",
    "output",
}


def build_config(data: Dict[str, Any]) -> Config:
    """Build a Config from a parsed YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a mapping")

    unknown = set(data) - KNOWN_KEYS
    if unknown:
        raise ConfigurationError("Unsupported config option(s): " + ", ".join(sorted(unknown)))

    cfg = Config()

    if data.get("input_file") is not None:
        cfg.input_file = Path(data["input_file"])
    if data.get("output_dir") is not None:
        cfg.output_dir = Path(data["output_dir"])
    if data.get("prefix") is not None:
        cfg.prefix = str(data["prefix"])
    if data.get("input_format") is not None:
        cfg.input_format = str(data["input_format"]).lower()
    if data.get("include_supplementary") is not None:
        cfg.include_supplementary = bool(data["include_supplementary"])

    # Runtime config
    for key, value in (data.get("runtime") or {}).items():
        if hasattr(cfg.runtime, key):
            if key == "log_file" and value:
                value = Path(value)
            setattr(cfg.runtime, key, value)

    # Output config
    output = data.get("output") or {}
    if "chunk_size" in output and output["chunk_size"] is not None:
        cfg.output.chunk_size = int(output["chunk_size"])
    if output.get("defaults"):
        cfg.output.defaults.update(output["defaults"])

    return cfg


def load_config(path: Path) -> Config:
    """Load configuration from YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    return build_config(data)


def save_config(cfg: Config, path: Path) -> None:
    """Save configuration to YAML file."""
    data = cfg.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
