"""
Exception types raised by the batch archiving pipeline.

Every failure is fatal to a run; callers either let these propagate or, for
``DestinationNotEmptyError``, treat them as a clean early exit.
"""


class BatchArchiveError(Exception):
    """Base class for all batch archiving failures."""

    pass


class DestinationNotEmptyError(BatchArchiveError):
    """Raised when the destination directory already has content."""

    def __init__(self, destination):
        super().__init__(f"Destination folder is not empty: {destination}")
        self.destination = destination


class PatternError(BatchArchiveError):
    """Raised when a file-name pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class EnumerationError(BatchArchiveError):
    """Raised when a directory cannot be read while matching a pattern."""

    pass


class InvalidChunkSizeError(BatchArchiveError, ValueError):
    """Raised when the number of files per archive is not a positive integer."""

    pass


class DuplicateEntryNameError(BatchArchiveError):
    """Raised when two files of one partition share a base name."""

    def __init__(self, archive_name: str, entry_name: str, paths):
        joined = ", ".join(str(path) for path in paths)
        super().__init__(
            f"Entry name {entry_name!r} appears more than once in {archive_name}: {joined}"
        )
        self.archive_name = archive_name
        self.entry_name = entry_name
        self.paths = list(paths)


class ArchiveWriteError(BatchArchiveError):
    """Raised when a source file cannot be read or an archive cannot be written."""

    pass


class ManifestWriteError(BatchArchiveError):
    """Raised when the manifest file cannot be opened or written."""

    pass


class ManifestFormatError(BatchArchiveError):
    """Raised when an existing manifest cannot be parsed."""

    pass


class ConfigError(BatchArchiveError):
    """Raised when runtime configuration cannot be loaded or is invalid."""

    pass
