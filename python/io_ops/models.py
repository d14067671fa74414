"""Shared data model for the partition -> archive -> manifest pipeline."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple


@dataclass(frozen=True)
class FileEntry:
    """A matched file, known to exist when the pattern was resolved."""

    path: Path

    @property
    def entry_name(self) -> str:
        """Name used for the archive entry and the manifest row."""
        return self.path.name


@dataclass(frozen=True)
class Partition:
    """A contiguous, ordered group of files destined for one archive."""

    index: int
    entries: Tuple[FileEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


@dataclass(frozen=True)
class ManifestRow:
    archive: str
    filename: str

    def as_record(self) -> List[str]:
        return [self.archive, self.filename]


@dataclass
class ArchiveUnit:
    """The archive written for one partition and the entries it received."""

    index: int
    name: str
    path: Path
    entry_names: List[str] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.entry_names)


@dataclass
class BatchResult:
    """Outcome of a completed batch run."""

    destination: Path
    manifest_path: Path
    archives: List[ArchiveUnit] = field(default_factory=list)
    manifest_rows: int = 0
    groups_completed: int = 0
    files_completed: int = 0

    @property
    def archive_count(self) -> int:
        return len(self.archives)
