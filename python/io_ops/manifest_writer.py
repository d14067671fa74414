"""
CSV manifest mapping every archived file to the archive that holds it.

The manifest is opened once per run and receives a row the moment a file
lands in its archive, so after a failure it still describes exactly what
is on disk.
"""

import csv
from pathlib import Path
from typing import List, Optional, Union
from colored_logger import get_colored_logger

from .errors import ManifestFormatError, ManifestWriteError
from .models import ManifestRow

logger = get_colored_logger(__name__)

MANIFEST_HEADER = ["zip", "filename"]


class ManifestWriter:
    """Append-only writer for ``zip,filename`` manifest rows."""

    def __init__(self, manifest_path: Union[str, Path]):
        self.manifest_path = Path(manifest_path)
        self.rows_written = 0
        self._handle = None
        self._writer = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self) -> "ManifestWriter":
        if self.is_open:
            return self
        try:
            self._handle = open(self.manifest_path, "w", encoding="utf-8", newline="")
            self._writer = csv.writer(self._handle, lineterminator="\n")
            self._writer.writerow(MANIFEST_HEADER)
        except OSError as e:
            self._close_quietly()
            raise ManifestWriteError(
                f"Failed to create manifest {self.manifest_path}: {e}"
            ) from e
        logger.debug("Manifest opened at %s", self.manifest_path)
        return self

    def write_row(self, archive_name: str, filename: str) -> ManifestRow:
        if not self.is_open:
            raise ManifestWriteError("Manifest is not open for writing")

        row = ManifestRow(archive=archive_name, filename=filename)
        try:
            self._writer.writerow(row.as_record())
        except (OSError, UnicodeEncodeError) as e:
            raise ManifestWriteError(
                f"Failed to write manifest row for {filename!r}: {e}"
            ) from e
        self.rows_written += 1
        return row

    def close(self) -> None:
        if not self.is_open:
            return
        try:
            self._handle.close()
        except OSError as e:
            raise ManifestWriteError(
                f"Failed to close manifest {self.manifest_path}: {e}"
            ) from e
        finally:
            self._handle = None
            self._writer = None
        logger.debug(
            "Manifest closed with %d rows: %s", self.rows_written, self.manifest_path
        )

    def _close_quietly(self) -> None:
        if self._handle is not None:
            try:
                self._handle.close()
            except OSError as e:
                logger.debug("Failed to close manifest %s: %s", self.manifest_path, e)
        self._handle = None
        self._writer = None

    def __enter__(self) -> "ManifestWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            # keep the original failure as the one that propagates
            self._close_quietly()


def read_manifest(manifest_path: Union[str, Path]) -> List[ManifestRow]:
    """
    Load all data rows of a manifest.

    Raises:
        ManifestFormatError: If the header is not ``zip,filename`` or a row is short
        OSError: If the file cannot be read
    """
    with open(manifest_path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        header: Optional[List[str]] = next(reader, None)
        if header != MANIFEST_HEADER:
            raise ManifestFormatError(
                f"Unexpected manifest header in {manifest_path}: {header}"
            )
        rows = []
        for line_number, row in enumerate(reader, start=2):
            if not row:
                continue
            if len(row) != 2:
                raise ManifestFormatError(
                    f"Malformed manifest row {line_number} in {manifest_path}: {row}"
                )
            rows.append(ManifestRow(archive=row[0], filename=row[1]))
        return rows
