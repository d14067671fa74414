"""
Progress counters for batch runs.

Two counters advance in lock-step with finished work: ``groups`` after each
archive is finalized and ``files`` after each file is written and recorded.
Rendering goes through the colored logger's PROGRESS level.
"""

from typing import Callable, Optional
from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

GROUPS = "groups"
FILES = "files"

ProgressCallback = Callable[[str, int, int], None]


def should_report_progress(current: int, total: int) -> bool:
    """Report roughly every 5% of the total, plus the first and last tick."""
    return current == 1 or current % max(1, total // 20) == 0 or current == total


class BatchProgress:
    """Groups/files counters with optional rendering and callback."""

    def __init__(
        self,
        total_groups: int = 0,
        total_files: int = 0,
        render: bool = True,
        callback: Optional[ProgressCallback] = None,
    ):
        self.total_groups = total_groups
        self.total_files = total_files
        self.render = render
        self.callback = callback
        self.groups = 0
        self.files = 0

    def start(self, total_groups: int, total_files: int) -> None:
        self.total_groups = total_groups
        self.total_files = total_files
        self.groups = 0
        self.files = 0

    def file_completed(self) -> int:
        self.files += 1
        self._tick(FILES, self.files, self.total_files)
        return self.files

    def group_completed(self) -> int:
        self.groups += 1
        self._tick(GROUPS, self.groups, self.total_groups)
        return self.groups

    def _tick(self, kind: str, current: int, total: int) -> None:
        if self.callback is not None:
            self.callback(kind, current, total)

        if not self.render or total <= 0:
            return

        if kind == GROUPS:
            logger.progress(
                "Blocks: %5d/%5d (%.1f%%)", current, total, current / total * 100
            )
        elif should_report_progress(current, total):
            logger.progress(
                "Files : %5d/%5d (%.1f%%)", current, total, current / total * 100
            )
