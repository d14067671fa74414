"""
Splitting of matched files into fixed-size partitions.

The input order is the enumerator's order and is never changed here, so the
same list and chunk size always give the same partitions.
"""

from pathlib import Path
from typing import Iterable, List, Union

from .errors import InvalidChunkSizeError
from .models import FileEntry, Partition


def validate_chunk_size(chunk_size) -> int:
    """Return ``chunk_size`` if it is a positive integer, else raise."""
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int):
        raise InvalidChunkSizeError(
            f"Files per archive must be an integer, got {chunk_size!r}"
        )
    if chunk_size <= 0:
        raise InvalidChunkSizeError(
            f"Files per archive must be greater than zero, got {chunk_size}"
        )
    return chunk_size


def partition_files(
    files: Iterable[Union[FileEntry, Path, str]], chunk_size: int
) -> List[Partition]:
    """
    Split ``files`` into ceil(N / chunk_size) contiguous partitions.

    Args:
        files: Ordered files; paths are wrapped into FileEntry
        chunk_size: Maximum number of files per partition

    Returns:
        Partitions indexed from zero; the last one holds the remainder

    Raises:
        InvalidChunkSizeError: If chunk_size is not a positive integer
    """
    chunk_size = validate_chunk_size(chunk_size)

    entries = [
        item if isinstance(item, FileEntry) else FileEntry(Path(item))
        for item in files
    ]

    return [
        Partition(index=index, entries=tuple(entries[start : start + chunk_size]))
        for index, start in enumerate(range(0, len(entries), chunk_size))
    ]
