"""Resource files and configuration templates."""


def get_default_config() -> str:
    """Return default configuration YAML content."""
    return """# irfilter Configuration File

# Input file (can be overridden by CLI arguments)
input_file: ~
# auto | ir | sam  (auto picks sam for .sam/.bam/.cram files)
input_format: "auto"
# Keep supplementary records of SAM/BAM/CRAM input as extra candidates
include_supplementary: false
output_dir: "irfilter_output"
prefix: "fragments"

# Runtime settings
runtime:
  log_level: "WARNING"
  log_file: ~
  enable_progress: true

# Output tables
output:
  chunk_size: 10000
  # Written to the aligned-only columns of unaligned records
  defaults:
    reference: ""
    strand: ""
    position: 0
    cigar: ""
"""
