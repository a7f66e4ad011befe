"""Custom exceptions for irfilter."""


class IRFilterError(Exception):
    """Base exception for all irfilter errors."""

    pass


class ConfigurationError(IRFilterError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(IRFilterError):
    """Raised when data validation fails."""

    pass


class CigarError(ValidationError):
    """Raised when a CIGAR string cannot be parsed."""

    def __init__(self, message="", cigar=None):
        """Initialize CigarError with the offending CIGAR text.

        Args:
            message: Error message
            cigar: The CIGAR string that failed to parse
        """
        super().__init__(message)
        self.cigar = cigar


class FileFormatError(IRFilterError):
    """Raised when an input file is unreadable or malformed."""

    def __init__(self, message="", path=None, line=None):
        """Initialize FileFormatError with optional location details.

        Args:
            message: Error message
            path: File that failed to parse
            line: 1-based line number of the offending row, if known
        """
        super().__init__(message)
        self.path = path
        self.line = line


class OutputError(IRFilterError):
    """Raised when an output table cannot be written."""

    pass


class PipelineError(IRFilterError):
    """Raised when the filtering run fails."""

    pass
