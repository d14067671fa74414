"""
Archive creation for batch partitions.

Each partition becomes one ZIP archive whose entries are stored without
compression, named by the source file's base name and carrying fixed
``rwxr-xr-x`` permissions whatever the source permissions are.
"""

import time
import warnings
import zipfile
from collections import defaultdict
from pathlib import Path
from typing import Callable, Optional
from colored_logger import get_colored_logger

from .errors import ArchiveWriteError, DuplicateEntryNameError
from .models import ArchiveUnit, FileEntry, Partition

logger = get_colored_logger(__name__)

ENTRY_PERMISSIONS = 0o755
DUPLICATE_POLICIES = ("error", "overwrite")

EntryCallback = Callable[[FileEntry], None]


def read_file_bytes(path: Path) -> bytes:
    """
    Read the full content of ``path`` into memory.

    The size is taken from the file's metadata first, so a file whose size
    cannot be determined fails the same way an unreadable one does.
    """
    with open(path, "rb") as src_file:
        expected_size = path.stat().st_size
        data = src_file.read()
    if len(data) < expected_size:
        raise OSError(
            f"Short read from {path}: expected {expected_size} bytes, got {len(data)}"
        )
    return data


class StoredZipArchiveCreator:
    """Writes one partition at a time as a stored (uncompressed) ZIP archive."""

    def __init__(self, duplicate_names: str = "error", allow_zip64: bool = True):
        if duplicate_names not in DUPLICATE_POLICIES:
            raise ValueError(f"Unsupported duplicate name policy: {duplicate_names}")
        self.duplicate_names = duplicate_names
        self.allow_zip64 = allow_zip64

    def _create_zipfile_instance(self, archive_path: Path) -> zipfile.ZipFile:
        return zipfile.ZipFile(
            archive_path,
            "w",
            zipfile.ZIP_STORED,
            allowZip64=self.allow_zip64,
        )

    def _build_zipinfo(self, entry_name: str) -> zipfile.ZipInfo:
        info = zipfile.ZipInfo(entry_name, date_time=time.localtime(time.time())[:6])
        info.compress_type = zipfile.ZIP_STORED
        info.create_system = 3  # unix, so external_attr carries mode bits
        info.external_attr = (0o100000 | ENTRY_PERMISSIONS) << 16
        return info

    def find_duplicate_names(self, partition: Partition) -> dict:
        """Map each base name used more than once to the paths sharing it."""
        by_name = defaultdict(list)
        for entry in partition:
            by_name[entry.entry_name].append(entry.path)
        return {name: paths for name, paths in by_name.items() if len(paths) > 1}

    def _check_duplicates(self, partition: Partition, archive_name: str) -> None:
        duplicates = self.find_duplicate_names(partition)
        if not duplicates:
            return

        if self.duplicate_names == "error":
            entry_name, paths = next(iter(duplicates.items()))
            raise DuplicateEntryNameError(archive_name, entry_name, paths)

        for entry_name, paths in duplicates.items():
            logger.warning(
                "%s: %d files named %s, the last one wins when extracted",
                archive_name,
                len(paths),
                entry_name,
            )

    def _add_entry(self, zipf: zipfile.ZipFile, entry: FileEntry) -> None:
        try:
            data = read_file_bytes(entry.path)
        except OSError as e:
            raise ArchiveWriteError(f"Failed to read {entry.path}: {e}") from e

        try:
            with warnings.catch_warnings():
                # zipfile warns on repeated names; the overwrite policy expects them
                warnings.simplefilter("ignore", UserWarning)
                zipf.writestr(self._build_zipinfo(entry.entry_name), data)
        except (OSError, UnicodeEncodeError, zipfile.LargeZipFile) as e:
            raise ArchiveWriteError(
                f"Failed to write {entry.entry_name!r} to {zipf.filename}: {e}"
            ) from e

    def write_partition(
        self,
        partition: Partition,
        archive_path: Path,
        on_entry_written: Optional[EntryCallback] = None,
    ) -> ArchiveUnit:
        """
        Write ``partition`` to ``archive_path`` entry by entry.

        ``on_entry_written`` runs after each entry is in the archive, before
        the next file is read. If anything fails, the archive is still closed
        so its directory lists exactly the entries already written.

        Args:
            partition: Files to archive, in order
            archive_path: Output ZIP path
            on_entry_written: Callback receiving each written FileEntry

        Returns:
            ArchiveUnit describing the finalized archive

        Raises:
            DuplicateEntryNameError: Base-name collision under the error policy
            ArchiveWriteError: If a file cannot be read or the archive written
        """
        archive_path = Path(archive_path)
        unit = ArchiveUnit(index=partition.index, name=archive_path.name, path=archive_path)

        self._check_duplicates(partition, unit.name)

        try:
            zipf = self._create_zipfile_instance(archive_path)
        except OSError as e:
            raise ArchiveWriteError(f"Failed to create {archive_path}: {e}") from e

        try:
            with zipf:
                for entry in partition:
                    self._add_entry(zipf, entry)
                    unit.entry_names.append(entry.entry_name)
                    if on_entry_written is not None:
                        on_entry_written(entry)
        except OSError as e:
            # raised while writing the central directory on close
            raise ArchiveWriteError(f"Failed to finalize {archive_path}: {e}") from e

        logger.debug(
            "Archive %s finalized with %d entries", unit.name, unit.entry_count
        )
        return unit
