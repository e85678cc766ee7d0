"""
Custom exception hierarchy for the incremental formatter.

Only configuration problems abort a run. Everything else is recovered
close to where it happens and reported as a warning or a per-file failure.
"""


class IncrementalFormatterError(Exception):
    """Base exception for all incremental formatter errors."""
    pass


class ConfigurationError(IncrementalFormatterError):
    """Raised when a run cannot start (bad root, missing executable, no extensions)."""
    pass


class ScanError(IncrementalFormatterError):
    """Raised when the scan root itself cannot be enumerated."""
    pass


class FileHashError(IncrementalFormatterError):
    """Raised when a file's content digest cannot be computed."""
    pass


class StampError(IncrementalFormatterError):
    """Raised when a fingerprint record cannot be read or written."""
    pass
