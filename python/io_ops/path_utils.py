"""
Destination layout for batch runs.

This module owns the on-disk shape of a run's output: the ``zip``
subdirectory holding ``<basename>_<index>.zip`` archives and the manifest
next to it. Archive names depend only on the destination and the partition
index, never on content.
"""

from pathlib import Path
from typing import Union
from colored_logger import get_colored_logger

from .errors import DestinationNotEmptyError

logger = get_colored_logger(__name__)

DEFAULT_ARCHIVE_SUBDIRECTORY = "zip"
DEFAULT_MANIFEST_NAME = "results.csv"


class DestinationLayout:
    """Computes and prepares the output paths under one destination."""

    def __init__(
        self,
        destination: Union[str, Path],
        archive_subdirectory: str = DEFAULT_ARCHIVE_SUBDIRECTORY,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
    ):
        self.destination = Path(destination)
        self.archive_subdirectory = archive_subdirectory
        self.manifest_name = manifest_name
        self.base_name = self._determine_base_name(self.destination)

    @staticmethod
    def _determine_base_name(destination: Path) -> str:
        """Last component of the destination, resolving ``.`` and ``..``."""
        name = destination.name
        if not name or name in (".", ".."):
            name = destination.resolve().name
        if not name:
            raise ValueError(f"Cannot derive archive base name from: {destination}")
        return name

    @property
    def archive_directory(self) -> Path:
        return self.destination / self.archive_subdirectory

    @property
    def manifest_path(self) -> Path:
        return self.destination / self.manifest_name

    def archive_name(self, index: int) -> str:
        return f"{self.base_name}_{index}.zip"

    def archive_path(self, index: int) -> Path:
        return self.archive_directory / self.archive_name(index)

    def is_populated(self) -> bool:
        """True when the destination is a directory with at least one entry."""
        if not self.destination.is_dir():
            return False
        return any(True for _ in self.destination.iterdir())

    def prepare(self) -> None:
        """
        Create the destination and its archive subdirectory.

        Raises:
            DestinationNotEmptyError: If the destination already has content
            OSError: If the directories cannot be created
        """
        if self.is_populated():
            raise DestinationNotEmptyError(self.destination)

        self.archive_directory.mkdir(parents=True, exist_ok=True)
        logger.debug("Prepared destination layout under %s", self.destination)
