"""
Batch Archive Manager - drives the partition -> archive -> manifest pipeline.

The manager coordinates focused components:
- Destination guard and naming: DestinationLayout
- File discovery: PatternFileScanner
- Grouping: partition_files
- Archive writing: StoredZipArchiveCreator
- Manifest rows: ManifestWriter
- Progress counters: BatchProgress

Partitions are written strictly in index order, one archive open at a time.
The first failure aborts the run; archives already finalized and manifest
rows already written stay on disk.
"""

import time
from pathlib import Path
from typing import List, Optional, Union
from colored_logger import get_colored_logger

from .archive_creators import StoredZipArchiveCreator
from .file_scanner import MatchOptions, PatternFileScanner
from .manifest_writer import ManifestWriter
from .models import BatchResult, FileEntry, Partition
from .partitioner import partition_files, validate_chunk_size
from .path_utils import (
    DEFAULT_ARCHIVE_SUBDIRECTORY,
    DEFAULT_MANIFEST_NAME,
    DestinationLayout,
)
from .progress import BatchProgress, ProgressCallback

logger = get_colored_logger(__name__)

DEFAULT_MAX_FILES_PER_ARCHIVE = 1000


class BatchArchiveManager:
    """Splits matched files into fixed-size stored ZIP archives plus a manifest."""

    def __init__(
        self,
        max_files_per_archive: int = DEFAULT_MAX_FILES_PER_ARCHIVE,
        duplicate_names: str = "error",
        archive_subdirectory: str = DEFAULT_ARCHIVE_SUBDIRECTORY,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
        show_progress: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the manager.

        Args:
            max_files_per_archive: Files per archive; must be positive
            duplicate_names: 'error' or 'overwrite' for base-name collisions
            archive_subdirectory: Directory under the destination for archives
            manifest_name: Manifest file name under the destination
            show_progress: Render progress lines through the logger
            progress_callback: Receives (kind, current, total) on every tick
        """
        self.max_files_per_archive = validate_chunk_size(max_files_per_archive)
        self.archive_subdirectory = archive_subdirectory
        self.manifest_name = manifest_name
        self.creator = StoredZipArchiveCreator(duplicate_names=duplicate_names)
        self.progress = BatchProgress(render=show_progress, callback=progress_callback)

        logger.debug(
            "BatchArchiveManager initialized: files_per_archive=%d, duplicates=%s",
            self.max_files_per_archive,
            duplicate_names,
        )

    def _layout(self, destination: Union[str, Path]) -> DestinationLayout:
        return DestinationLayout(
            destination,
            archive_subdirectory=self.archive_subdirectory,
            manifest_name=self.manifest_name,
        )

    def _write_partition(
        self,
        partition: Partition,
        layout: DestinationLayout,
        manifest: ManifestWriter,
        result: BatchResult,
    ) -> None:
        archive_name = layout.archive_name(partition.index)

        def record(entry: FileEntry) -> None:
            manifest.write_row(archive_name, entry.entry_name)
            result.files_completed = self.progress.file_completed()

        unit = self.creator.write_partition(
            partition, layout.archive_path(partition.index), on_entry_written=record
        )
        result.archives.append(unit)
        result.groups_completed = self.progress.group_completed()

        logger.info("Archive written: %s (%d files)", unit.name, unit.entry_count)

    def archive_files(
        self, files: List[FileEntry], destination: Union[str, Path]
    ) -> BatchResult:
        """
        Archive an already enumerated, ordered list of files.

        The destination must be missing or empty.

        Raises:
            DestinationNotEmptyError: If the destination already has content
            DuplicateEntryNameError: On a base-name collision under the error policy
            ArchiveWriteError: If a source file or archive cannot be read/written
            ManifestWriteError: If the manifest cannot be written
        """
        layout = self._layout(destination)
        layout.prepare()
        return self._run_pipeline(files, layout)

    def _run_pipeline(
        self, files: List[FileEntry], layout: DestinationLayout
    ) -> BatchResult:
        partitions = partition_files(files, self.max_files_per_archive)
        result = BatchResult(
            destination=layout.destination, manifest_path=layout.manifest_path
        )

        logger.info(
            "Archiving %d files into %d archives of up to %d files",
            len(files),
            len(partitions),
            self.max_files_per_archive,
        )

        start_time = time.time()
        self.progress.start(len(partitions), len(files))

        manifest = ManifestWriter(layout.manifest_path)
        try:
            with manifest:
                for partition in partitions:
                    self._write_partition(partition, layout, manifest, result)
        finally:
            result.manifest_rows = manifest.rows_written

        logger.success(
            "Batch complete: %d archives, %d files, manifest %s (%.2f seconds)",
            result.archive_count,
            result.manifest_rows,
            layout.manifest_path,
            time.time() - start_time,
        )
        return result

    def run(
        self,
        pattern: str,
        destination: Union[str, Path],
        match_options: Optional[MatchOptions] = None,
    ) -> BatchResult:
        """
        Resolve ``pattern`` and archive every match under ``destination``.

        The destination guard runs before the pattern is resolved, and the
        pattern is resolved before any archive is created.

        Args:
            pattern: Glob-style file pattern
            destination: Output directory; must be missing or empty
            match_options: Case sensitivity and literal separator/dot switches

        Returns:
            BatchResult describing archives and manifest

        Raises:
            DestinationNotEmptyError: If the destination already has content
            PatternError: If the pattern is malformed
            EnumerationError: If a directory cannot be read during matching
            DuplicateEntryNameError: On a base-name collision under the error policy
            ArchiveWriteError: If a source file or archive cannot be read/written
            ManifestWriteError: If the manifest cannot be written
        """
        layout = self._layout(destination)
        layout.prepare()

        logger.info("Resolving pattern %s into %s", pattern, layout.destination)
        scanner = PatternFileScanner(match_options)
        files, _ = scanner.collect(pattern)

        if not files:
            logger.warning("No files match pattern: %s", pattern)

        return self._run_pipeline(files, layout)
