"""
Consistency checks for finished batch destinations.

The verifier re-reads ``results.csv`` and every archive under the archive
subdirectory and reports any row without a matching entry, any entry
without a row, and any archive failing its CRC check.
"""

import zipfile
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union
from colored_logger import get_colored_logger

from .errors import ManifestFormatError
from .manifest_writer import read_manifest
from .path_utils import DEFAULT_ARCHIVE_SUBDIRECTORY, DEFAULT_MANIFEST_NAME

logger = get_colored_logger(__name__)


@dataclass
class VerificationReport:
    """Outcome of verifying one destination."""

    destination: Path
    archive_count: int = 0
    row_count: int = 0
    entry_count: int = 0
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


class ZipArchiveVerifier:
    """Verifies ZIP archive integrity and describes its contents."""

    def verify_integrity(self, archive_path: Union[str, Path]) -> bool:
        try:
            with zipfile.ZipFile(archive_path, "r") as zipf:
                bad_file = zipf.testzip()
                if bad_file is not None:
                    logger.debug("ZIP integrity check failed on file: %s", bad_file)
                    return False
                return True
        except (OSError, zipfile.BadZipFile) as e:
            logger.debug("ZIP integrity verification failed: %s", e)
            return False

    def list_entries(self, archive_path: Union[str, Path]) -> List[str]:
        """Entry names of an existing archive, in stored order."""
        with zipfile.ZipFile(archive_path, "r") as zipf:
            return zipf.namelist()

    def get_archive_info(self, archive_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Describe an archive: entry count, sizes, and whether every entry is stored.

        Raises:
            FileNotFoundError: If the archive does not exist
            zipfile.BadZipFile: If the file is not a ZIP archive
        """
        path = Path(archive_path)
        if not path.exists():
            raise FileNotFoundError(f"Archive not found: {archive_path}")

        with zipfile.ZipFile(path, "r") as zipf:
            infos = zipf.infolist()

        return {
            "path": str(path),
            "size_bytes": path.stat().st_size,
            "modified_time": datetime.fromtimestamp(path.stat().st_mtime).isoformat(),
            "file_count": len(infos),
            "uncompressed_size": sum(info.file_size for info in infos),
            "stored_only": all(info.compress_type == zipfile.ZIP_STORED for info in infos),
            "entries": [
                {
                    "name": info.filename,
                    "size_bytes": info.file_size,
                    "mode": oct((info.external_attr >> 16) & 0o777),
                }
                for info in infos
            ],
        }


class ManifestVerifier:
    """Checks that a destination's manifest and archives describe each other."""

    def __init__(
        self,
        archive_subdirectory: str = DEFAULT_ARCHIVE_SUBDIRECTORY,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
    ):
        self.archive_subdirectory = archive_subdirectory
        self.manifest_name = manifest_name
        self.zip_verifier = ZipArchiveVerifier()

    def _read_archive_entries(
        self, archive_directory: Path, report: VerificationReport
    ) -> Counter:
        pairs: Counter = Counter()
        for archive_path in sorted(archive_directory.glob("*.zip")):
            report.archive_count += 1
            if not self.zip_verifier.verify_integrity(archive_path):
                report.problems.append(f"{archive_path.name}: integrity check failed")
                continue
            for name in self.zip_verifier.list_entries(archive_path):
                pairs[(archive_path.name, name)] += 1
        return pairs

    def verify(self, destination: Union[str, Path]) -> VerificationReport:
        """
        Compare the manifest rows of ``destination`` with its archives' entries.

        The comparison is between multisets of ``(archive, entry)`` pairs, so
        duplicate names written under the overwrite policy still balance.
        """
        destination = Path(destination)
        report = VerificationReport(destination=destination)

        manifest_path = destination / self.manifest_name
        archive_directory = destination / self.archive_subdirectory

        if not manifest_path.is_file():
            report.problems.append(f"Manifest not found: {manifest_path}")
            return report
        if not archive_directory.is_dir():
            report.problems.append(f"Archive directory not found: {archive_directory}")
            return report

        try:
            rows = read_manifest(manifest_path)
        except (OSError, ManifestFormatError) as e:
            report.problems.append(str(e))
            return report

        report.row_count = len(rows)
        row_pairs = Counter((row.archive, row.filename) for row in rows)
        entry_pairs = self._read_archive_entries(archive_directory, report)
        report.entry_count = sum(entry_pairs.values())

        for (archive, filename), count in sorted((row_pairs - entry_pairs).items()):
            if not (archive_directory / archive).is_file():
                report.problems.append(
                    f"{filename}: manifest names missing archive {archive}"
                )
            else:
                report.problems.append(
                    f"{filename}: {count} manifest row(s) without entry in {archive}"
                )

        for (archive, filename), count in sorted((entry_pairs - row_pairs).items()):
            report.problems.append(
                f"{filename}: {count} entry(ies) in {archive} without manifest row"
            )

        if report.ok:
            logger.debug(
                "Verified %d rows against %d archives", report.row_count, report.archive_count
            )
        return report
