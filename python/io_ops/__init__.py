from .errors import (
    BatchArchiveError,
    DestinationNotEmptyError,
    PatternError,
    EnumerationError,
    InvalidChunkSizeError,
    DuplicateEntryNameError,
    ArchiveWriteError,
    ManifestWriteError,
    ManifestFormatError,
    ConfigError,
)
from .models import FileEntry, Partition, ArchiveUnit, ManifestRow, BatchResult

# Pipeline components
from .file_scanner import MatchOptions, GlobPattern, PatternFileScanner, FileStats
from .partitioner import partition_files, validate_chunk_size
from .archive_creators import StoredZipArchiveCreator, ENTRY_PERMISSIONS
from .manifest_writer import ManifestWriter, MANIFEST_HEADER, read_manifest
from .progress import BatchProgress
from .path_utils import DestinationLayout
from .archive_verifier import ManifestVerifier, VerificationReport, ZipArchiveVerifier

# Orchestrator
from .archive_manager import BatchArchiveManager

__all__ = [
    # Errors
    "BatchArchiveError",
    "DestinationNotEmptyError",
    "PatternError",
    "EnumerationError",
    "InvalidChunkSizeError",
    "DuplicateEntryNameError",
    "ArchiveWriteError",
    "ManifestWriteError",
    "ManifestFormatError",
    "ConfigError",
    # Data model
    "FileEntry",
    "Partition",
    "ArchiveUnit",
    "ManifestRow",
    "BatchResult",
    # File discovery
    "MatchOptions",
    "GlobPattern",
    "PatternFileScanner",
    "FileStats",
    # Partitioning
    "partition_files",
    "validate_chunk_size",
    # Archive and manifest writing
    "StoredZipArchiveCreator",
    "ENTRY_PERMISSIONS",
    "ManifestWriter",
    "MANIFEST_HEADER",
    "read_manifest",
    "BatchProgress",
    "DestinationLayout",
    # Verification
    "ManifestVerifier",
    "VerificationReport",
    "ZipArchiveVerifier",
    # Orchestration
    "BatchArchiveManager",
]
